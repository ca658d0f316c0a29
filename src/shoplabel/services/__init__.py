"""
Business services: billing, OAuth and order fulfillment.
"""
