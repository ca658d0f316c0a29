"""
ShopLabel

Glue service for TikTok Shop sellers: stores marketplace and carrier
credentials, turns incoming TikTok Shop orders into Packlink shipping labels
and reports every generated label to Stripe as metered usage.
"""

__version__ = "1.0.0"
__author__ = "ShopLabel Team"
