"""
isp_graph：ISP处理图描述层
在交给执行目标之前，以编程方式声明节点、端口和端口之间的连接
"""

__version__ = "0.1.0"

from .core import (
    Pipeline, Node, Output, Input, OutputMap, InputMap, Connection,
    MessageQueue, Buffer, ImgFrame, MessageGroup
)
from .config import load_config, create_pipeline_from_config

__all__ = [
    '__version__',
    'Pipeline', 'Node', 'Output', 'Input', 'OutputMap', 'InputMap', 'Connection',
    'MessageQueue', 'Buffer', 'ImgFrame', 'MessageGroup',
    'load_config', 'create_pipeline_from_config'
]
