"""Registry of tag visitors consulted by the HTML rewriting pass."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterator, Optional, Protocol, Tuple, runtime_checkable

from urlmetrics_core.errors import InvalidArgumentError

if TYPE_CHECKING:  # pragma: no cover - import for type-checkers only
    from urlmetrics_core.collection import URLMetricGroupCollection

__all__ = ["TagVisitor", "TagVisitorContext", "TagVisitorRegistry"]


@dataclass(frozen=True)
class TagVisitorContext:
    """Tag being visited together with the URL Metrics gathered for the page."""

    xpath: str
    url_metric_group_collection: "URLMetricGroupCollection"


@runtime_checkable
class TagVisitor(Protocol):
    """Inspects a tag and reports whether it needs URL Metrics collected."""

    def __call__(self, context: TagVisitorContext) -> bool:
        ...


class TagVisitorRegistry:
    """Tag visitors keyed by identifier, iterated in registration order."""

    __slots__ = ("_visitors",)

    def __init__(self) -> None:
        self._visitors: Dict[str, TagVisitor] = {}

    def __len__(self) -> int:
        return len(self._visitors)

    def __iter__(self) -> Iterator[Tuple[str, TagVisitor]]:
        return iter(tuple(self._visitors.items()))

    def register(self, identifier: str, visitor: TagVisitor) -> None:
        if not identifier:
            raise InvalidArgumentError("Tag visitor identifier must be a non-empty string")
        if not callable(visitor):
            raise InvalidArgumentError(
                f"Tag visitor '{identifier}' must be callable",
                context={"identifier": identifier},
            )
        self._visitors[identifier] = visitor

    def is_registered(self, identifier: str) -> bool:
        return identifier in self._visitors

    def get(self, identifier: str) -> Optional[TagVisitor]:
        return self._visitors.get(identifier)

    def unregister(self, identifier: str) -> bool:
        return self._visitors.pop(identifier, None) is not None

    def visit(self, context: TagVisitorContext) -> bool:
        """Run every visitor; true when at least one tracked the tag."""

        tracked = False
        for visitor in tuple(self._visitors.values()):
            if visitor(context):
                tracked = True
        return tracked
