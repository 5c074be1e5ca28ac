"""
RGB Processing Nodes Module

This module contains nodes for processing RGB data:
- Tone mapping
"""

from .tone_mapping import ToneMappingNode

__all__ = [
    "ToneMappingNode",
]
