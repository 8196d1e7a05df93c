"""Port: static group assignment for ingested items."""

from __future__ import annotations

from abc import ABC, abstractmethod


class GroupClassifierPort(ABC):
    """Assign each item to one initial group."""

    @property
    @abstractmethod
    def groups(self) -> list[str]:
        """Every group this classifier can return, in display order."""

    @abstractmethod
    def classify(self, text: str) -> str:
        """Return the group for an item's label or free text."""
