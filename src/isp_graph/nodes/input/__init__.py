"""
输入节点模块
"""

from .raw_input import RawInputNode

__all__ = ["RawInputNode"]
