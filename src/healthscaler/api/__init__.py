"""
Status API for the health monitor and scaling simulator
"""

from .server import APIServer

__all__ = ["APIServer"]
