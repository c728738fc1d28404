"""
Pipe Catalog Core Library.

This package provides the core functionality for the pipe catalog,
including database management, models, repositories, services, caching and logging.

Usage:
    # Database
    from catalog.db import db, get_db
    from catalog.models import Pipe, Tobacco, Accessory
    from catalog.repositories import PipeRepository

    # Cache
    from catalog.cache import RedisCache, CacheKeys

    # Config
    from catalog.config import get_settings, Settings

    # Logging
    from catalog.logging import get_logger, configure_logging
"""

__version__ = "1.0.0"

# Lazy imports to avoid circular dependencies
# Users should import directly from submodules:
#   from catalog.db import db
#   from catalog.config import get_settings
#   from catalog.logging import get_logger
