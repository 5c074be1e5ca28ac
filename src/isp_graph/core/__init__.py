"""
核心模块
包含Pipeline容器、节点基类、端口与连接、消息队列、消息类型等核心功能
"""

from .pipeline import Pipeline
from .node import Node, InputNode, ProcessingNode, OutputNode, NodeType
from .port import (
    Port, Output, Input, OutputMap, InputMap, Connection, OutputType, InputType,
    DEFAULT_BLOCKING, DEFAULT_QUEUE_SIZE, DEFAULT_WAIT_FOR_MESSAGE
)
from .message_queue import MessageQueue
from .message import (
    Buffer, ImgFrame, MessageGroup, ColorFormat, BayerPattern,
    DatatypeEnum, DatatypeHierarchy, is_datatype_subclass_of
)
from .asset import Asset, AssetManager

__all__ = [
    'Pipeline',
    'Node', 'InputNode', 'ProcessingNode', 'OutputNode', 'NodeType',
    'Port', 'Output', 'Input', 'OutputMap', 'InputMap', 'Connection', 'OutputType', 'InputType',
    'DEFAULT_BLOCKING', 'DEFAULT_QUEUE_SIZE', 'DEFAULT_WAIT_FOR_MESSAGE',
    'MessageQueue',
    'Buffer', 'ImgFrame', 'MessageGroup', 'ColorFormat', 'BayerPattern',
    'DatatypeEnum', 'DatatypeHierarchy', 'is_datatype_subclass_of',
    'Asset', 'AssetManager'
]
