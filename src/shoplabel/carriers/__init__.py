"""
Shipping carrier clients.
"""

from .packlink_client import PacklinkClient

__all__ = ["PacklinkClient"]
