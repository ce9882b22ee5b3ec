from .content_repository import ContentRepository, EntityKind, Page

__all__ = ["ContentRepository", "EntityKind", "Page"]
