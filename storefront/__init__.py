"""
Storefront - accounts, items and a shopping cart behind a FastAPI API.
"""

__version__ = "0.1.0"
