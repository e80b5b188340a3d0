"""
API Routers - Modular organization of API endpoints
"""
from . import health, cis, relationships, schemas

__all__ = ["health", "cis", "relationships", "schemas"]
