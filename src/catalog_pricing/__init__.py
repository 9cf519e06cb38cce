"""
Catalog Pricing Package

Builds catalogue price grids for a selected price list.
Resolves Column Matrix → Latest Observations → Cost Override → Ratio Gap-Fill → Rows.
"""

__version__ = "1.0.0"
