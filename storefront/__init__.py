"""Storefront API — jewelry catalog backend with token authentication"""

__version__ = "1.0.0"
