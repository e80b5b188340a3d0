"""
CMDB HTTP API
"""
