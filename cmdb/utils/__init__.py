"""
Utility modules - Shared utilities for the application

This module should NEVER import from other cmdb modules (validation, database, services)
to maintain the import hierarchy and prevent circular dependencies.
"""

# ============================================
# CONFIGURATION
# ============================================
from .config import Config, ConfigDefaults, load_config

# ============================================
# LOGGING
# ============================================
from .logger import setup_logger

# ============================================
# PAGINATION
# ============================================
from .pagination import PaginationParams, PageInfo, PaginatedResponse

__all__ = [
    'Config',
    'ConfigDefaults',
    'load_config',
    'setup_logger',
    'PaginationParams',
    'PageInfo',
    'PaginatedResponse',
]
