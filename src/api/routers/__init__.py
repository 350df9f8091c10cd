"""API routers."""

from api.routers import conversations, mentions, metrics

__all__ = ["conversations", "mentions", "metrics"]
