"""
Historial lineal de snapshots para deshacer/rehacer.
"""
from .models import Scene


class SceneHistory:
    """Pila lineal de escenas completas."""

    def __init__(self, initial: Scene):
        self._snapshots: list[Scene] = [initial]
        self._index = 0

    @property
    def current(self) -> Scene:
        return self._snapshots[self._index]

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._snapshots) - 1

    def commit(self, scene: Scene) -> Scene:
        """Registra una escena nueva y descarta lo que se podía rehacer."""
        if scene is self.current:
            return scene
        self._snapshots = self._snapshots[: self._index + 1]
        self._snapshots.append(scene)
        self._index = len(self._snapshots) - 1
        return scene

    def undo(self) -> Scene:
        if self.can_undo:
            self._index -= 1
        return self.current

    def redo(self) -> Scene:
        if self.can_redo:
            self._index += 1
        return self.current

    def __len__(self) -> int:
        return len(self._snapshots)
