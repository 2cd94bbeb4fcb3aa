from .manager import ProjectCacheManager

__all__ = ["ProjectCacheManager"]
