"""
Configuration management
"""
import os
from pathlib import Path
from typing import Any, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel


# ============================================
# CONFIGURATION DEFAULTS
# ============================================

class ConfigDefaults:
    """Default configuration values as constants"""

    # Server defaults
    SERVER_HOST_DEFAULT = "0.0.0.0"
    SERVER_PORT_DEFAULT = 8080

    # Database defaults
    DATABASE_URL_DEFAULT = "sqlite:///./data/cmdb.db"
    DATABASE_POOL_SIZE = 5

    # CORS defaults
    CORS_ALLOWED_ORIGINS = ["*"]
    CORS_ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    CORS_ALLOWED_HEADERS = ["Content-Type", "Authorization", "X-User-Id"]
    CORS_MAX_AGE = 600

    # Logging defaults
    LOGGING_LEVEL_INFO = "INFO"

    # Pagination defaults
    PAGE_SIZE_DEFAULT = 20
    PAGE_SIZE_MAX = 100

    # Config file defaults
    CONFIG_PATH_DEFAULT = "config/config.yaml"


# ============================================
# CONFIGURATION MODELS
# ============================================

class ServerConfig(BaseModel):
    """HTTP server configuration"""
    host: str = ConfigDefaults.SERVER_HOST_DEFAULT
    port: int = ConfigDefaults.SERVER_PORT_DEFAULT


class DatabaseConfig(BaseModel):
    """Database configuration"""
    url: str = ConfigDefaults.DATABASE_URL_DEFAULT
    echo: bool = False
    pool_size: int = ConfigDefaults.DATABASE_POOL_SIZE


class CORSConfig(BaseModel):
    """Cross-origin resource sharing configuration"""
    allowed_origins: List[str] = ConfigDefaults.CORS_ALLOWED_ORIGINS
    allowed_methods: List[str] = ConfigDefaults.CORS_ALLOWED_METHODS
    allowed_headers: List[str] = ConfigDefaults.CORS_ALLOWED_HEADERS
    allow_credentials: bool = False
    max_age: int = ConfigDefaults.CORS_MAX_AGE


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = ConfigDefaults.LOGGING_LEVEL_INFO
    file: Optional[str] = None


class Config(BaseModel):
    """Main configuration"""
    environment: str = "development"
    server: ServerConfig = ServerConfig()
    database: DatabaseConfig = DatabaseConfig()
    cors: CORSConfig = CORSConfig()
    logging: LoggingConfig = LoggingConfig()


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file and environment variables.

    A missing file is not an error: defaults and environment variables apply.
    """
    load_dotenv()

    config_path = config_path or os.getenv("CMDB_CONFIG", ConfigDefaults.CONFIG_PATH_DEFAULT)

    config_dict = {}
    if Path(config_path).exists():
        with open(config_path, 'r') as f:
            config_dict = yaml.safe_load(f) or {}

    config_dict = _replace_env_vars(config_dict)
    config = Config(**config_dict)

    # DATABASE_URL always wins over the file
    db_url = os.getenv("DATABASE_URL")
    if db_url:
        config.database.url = db_url

    return config


def _replace_env_vars(obj: Any) -> Any:
    """
    Recursively replace ${VAR} placeholders with environment variables.
    """
    if isinstance(obj, dict):
        return {k: _replace_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_replace_env_vars(item) for item in obj]
    elif isinstance(obj, str) and obj.startswith("${") and obj.endswith("}"):
        var_name = obj[2:-1]
        env_value = os.getenv(var_name)
        if env_value:
            return env_value
        return obj
    return obj
