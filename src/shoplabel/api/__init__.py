"""
HTTP API for ShopLabel.
"""
