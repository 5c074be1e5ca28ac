"""
Raw Processing Nodes Module

This module contains nodes for processing RAW sensor data:
- Demosaicing
"""

from .demosaic import DemosaicNode

__all__ = [
    "DemosaicNode",
]
