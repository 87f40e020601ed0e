"""
Web interface module for viewing recorded runs.
"""

from .viewer_server import ViewerServer

__all__ = ['ViewerServer']
