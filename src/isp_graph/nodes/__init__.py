"""
ISP节点模块
包含各种ISP节点的端口声明
"""

# 输入节点
from .input.raw_input import RawInputNode

# RAW处理节点
from .raw_processing.demosaic import DemosaicNode

# RGB处理节点
from .rgb_processing.tone_mapping import ToneMappingNode

# 同步节点
from .sync.frame_sync import FrameSyncNode
from .sync.demux import MessageDemuxNode

# 输出节点
from .output.host_output import HostOutputNode

__all__ = [
    'RawInputNode',
    'DemosaicNode',
    'ToneMappingNode',
    'FrameSyncNode',
    'MessageDemuxNode',
    'HostOutputNode'
]
