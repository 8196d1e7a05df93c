"""Port: draw a cluster frame."""

from __future__ import annotations

from abc import ABC, abstractmethod

from clusterview.domain.models import RenderFrame


class RendererPort(ABC):
    """Turn a ``RenderFrame`` into a drawable artefact."""

    @abstractmethod
    def render(self, frame: RenderFrame) -> str:
        """Draw *frame* and return the rendered output (e.g. HTML)."""
