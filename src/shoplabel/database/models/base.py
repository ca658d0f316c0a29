"""
Declarative base shared by all ShopLabel models.
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
