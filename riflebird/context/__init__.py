from .provider import ProjectContextProvider

__all__ = ["ProjectContextProvider"]
