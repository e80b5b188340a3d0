"""
CMDB - Configuration items and relationships with runtime-declared schemas
"""

__version__ = "1.0.0"
