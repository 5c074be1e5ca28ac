"""
同步节点模块
包含多路输入同步和消息拆分节点
"""

from .frame_sync import FrameSyncNode
from .demux import MessageDemuxNode

__all__ = [
    "FrameSyncNode",
    "MessageDemuxNode",
]
