"""
Spot Hazard Hub - community hazard reporting and deletion consensus for spots.
"""

__version__ = "0.1.0"
