"""
Structured logging for the dev reputation service.

JSON logs with timestamp, dev_id, event_type.
Use get_logger() in all modules for aggregation-friendly output.
"""

from backend_devscore.devscore_logging.logger import bind_dev, configure_structlog, get_logger

__all__ = ["bind_dev", "configure_structlog", "get_logger"]
