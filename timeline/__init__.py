"""
Timeline Browsing Module

This module provides the interactive browsing core for Defender device timeline
exports: derived indexes, the filter engine, time range resolution and the modal
key handling that drives them. The PyQt5 window lives in timeline_window and is
imported only by the entry point.
"""

__version__ = "1.0.0"
__author__ = "Timeline Lens Development Team"
