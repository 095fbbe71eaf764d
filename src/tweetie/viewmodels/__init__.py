"""View-models exposing view-facing streams."""

from .list_timeline import ListTimelineViewModel, default_store

__all__ = ["ListTimelineViewModel", "default_store"]
