"""
Validation messages collected for a single entity.
"""

from typing import Callable, Dict, Iterator, List, Tuple


class ErrorBag:
    """
    Attribute name to ordered list of validation messages.

    Owned by exactly one entity, filled by its validate() hook and cleared on
    every validity check or successful persistence.
    """

    def __init__(self, entity=None):
        self.entity = entity
        self._errors: Dict[str, List[str]] = {}

    def add(self, attribute: str, message: str) -> "ErrorBag":
        """Record message against attribute."""
        self._errors.setdefault(attribute, []).append(message)
        return self

    def clear(self) -> "ErrorBag":
        self._errors = {}
        return self

    def on(self, attribute: str) -> List[str]:
        """Messages recorded for attribute, empty when there are none."""
        return list(self._errors.get(attribute, []))

    def all(self) -> Dict[str, List[str]]:
        return self.to_dict()

    def each(self, func: Callable[[str, str], None]) -> "ErrorBag":
        """Call func(attribute, message) for every message in order."""
        for attribute, message in self:
            func(attribute, message)
        return self

    def count(self) -> int:
        """Total number of messages across all attributes."""
        return sum(len(messages) for messages in self._errors.values())

    def to_dict(self) -> Dict[str, List[str]]:
        return {attribute: list(messages) for attribute, messages in self._errors.items()}

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        for attribute, messages in list(self._errors.items()):
            for message in list(messages):
                yield attribute, message

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, attribute: str) -> bool:
        return bool(self._errors.get(attribute))

    def __repr__(self) -> str:
        return f"ErrorBag({self._errors!r})"


__all__ = ["ErrorBag"]
