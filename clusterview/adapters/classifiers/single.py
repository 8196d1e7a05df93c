"""Classifier adapter: everything in one group."""

from __future__ import annotations

from clusterview.ports.classifier import GroupClassifierPort


class SingleGroupClassifier(GroupClassifierPort):
    def __init__(self, group: str = "All"):
        self._group = group

    @property
    def groups(self) -> list[str]:
        return [self._group]

    def classify(self, text: str) -> str:
        return self._group
