"""Core: config, constants, and repository lifespan.

Single place for settings and shared constants.
"""

from recordstore.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
