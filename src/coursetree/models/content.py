"""Domain models for course content trees."""

from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class ContentItem:
    """A single item of a course content tree.

    Wraps the raw JSON object so that edits land in place and key order survives
    a save. ``collection`` and ``index`` record where the item was declared on disk.
    """

    data: dict[str, Any]
    collection: str
    index: int = 0

    @property
    def id(self) -> str:
        return self.data.get("_id", "")

    @property
    def parent_id(self) -> str | None:
        return self.data.get("_parentId") or None

    @property
    def type(self) -> str:
        return self.data.get("_type", "")

    @property
    def tracking_id(self) -> int | None:
        return self.data.get("_trackingId")

    @tracking_id.setter
    def tracking_id(self, value: int | None) -> None:
        if value is None:
            self.data.pop("_trackingId", None)
        else:
            self.data["_trackingId"] = value

    @property
    def title(self) -> str | None:
        """Human-readable title, used as translator context."""
        for key in ("displayTitle", "title"):
            value = self.data.get(key)
            if isinstance(value, str) and value:
                return value
        return None

    def __repr__(self) -> str:
        return f"ContentItem({self.type}:{self.id!r})"


@dataclass(frozen=True)
class Violation:
    """An identifier invariant broken by a content tree."""

    kind: str
    item_id: str | None
    message: str
