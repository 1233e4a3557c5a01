"""
spotavail - availability model for bookable parking spots.
"""

__version__ = "0.1.0"
