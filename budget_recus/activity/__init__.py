"""Activity logging package."""

from budget_recus.activity.logger import ActivityLogger, create_correlation_id

__all__ = ["ActivityLogger", "create_correlation_id"]
