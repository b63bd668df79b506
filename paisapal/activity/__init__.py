"""Activity logging package."""

from paisapal.activity.logger import ActivityLogger, configure_logging, create_session_id

__all__ = ["ActivityLogger", "configure_logging", "create_session_id"]
