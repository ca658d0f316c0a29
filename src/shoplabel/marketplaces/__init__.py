"""
Marketplace clients.
"""

from .tiktok_client import TikTokShopClient, TikTokTokens

__all__ = ["TikTokShopClient", "TikTokTokens"]
