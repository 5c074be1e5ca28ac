"""
输出节点模块
"""

from .host_output import HostOutputNode

__all__ = ["HostOutputNode"]
