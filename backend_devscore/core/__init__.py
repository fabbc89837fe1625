"""
Core utilities — domain exceptions shared by the scorer, worker, and API server.
"""

from backend_devscore.core.exceptions import ConfigError, DevNotFoundError, DevScoreError

__all__ = ["ConfigError", "DevNotFoundError", "DevScoreError"]
