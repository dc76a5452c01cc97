from .parser import SceneParser

__all__ = ["SceneParser"]
