"""
Window Placements

The placement entity stored per dashboard window, its content kinds and
its serialized document form.
"""

from __future__ import annotations
import random
import string
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List

from .geometry import Span, span

_ID_ALPHABET = string.digits + string.ascii_lowercase


class WindowKind(Enum):
    """Content types a dashboard window can show.

    Declaration order is the order of the add-window menu.
    """

    BASIC_OFFICE_DATA = "basic-office-data"
    PROJECTS_LIST = "projects-list"
    PROJECTS_TIMELINE = "projects-timeline"
    EMPLOYEES_LIST = "employees-list"
    OFFICE_NOTES = "office-notes"
    COMPANY_STRUCTURE = "company-structure"
    OFFICE_FINANCIALS = "office-financials"

    @property
    def label(self) -> str:
        """Human readable menu label."""
        return _LABELS[self]


_LABELS = {
    WindowKind.BASIC_OFFICE_DATA: "Basic Office Data",
    WindowKind.PROJECTS_LIST: "Projects List",
    WindowKind.PROJECTS_TIMELINE: "Projects Timeline",
    WindowKind.EMPLOYEES_LIST: "Employees List",
    WindowKind.OFFICE_NOTES: "Office Notes",
    WindowKind.COMPANY_STRUCTURE: "Company Structure",
    WindowKind.OFFICE_FINANCIALS: "Office Financials",
}

# Only the notes window can span several columns
DEFAULT_RESIZABLE_KINDS = frozenset({WindowKind.OFFICE_NOTES})


def new_window_id() -> str:
    """Generate a window id: window-<epoch millis>-<9 base-36 chars>."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"window-{int(time.time() * 1000)}-{suffix}"


@dataclass
class WindowPlacement:
    """A window's grid position, size and content kind.

    anchor_col is the middle column of the occupied span, not the leftmost.
    """

    id: str
    kind: WindowKind
    row: int
    anchor_col: int
    width: int = 1
    height: int = 1

    @property
    def leftmost_col(self) -> int:
        return self.col_span[0]

    @property
    def rightmost_col(self) -> int:
        return self.col_span[1]

    @property
    def top_row(self) -> int:
        return self.row_span[0]

    @property
    def bottom_row(self) -> int:
        return self.row_span[1]

    @property
    def col_span(self) -> Span:
        return span(self.anchor_col, self.width)

    @property
    def row_span(self) -> Span:
        return span(self.row, self.height)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the stored document form."""
        return {
            "id": self.id,
            "type": self.kind.value,
            "gridPosition": {
                "row": self.row,
                "col": self.anchor_col,
                "width": self.width,
                "height": self.height,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WindowPlacement":
        """Deserialize from the stored document form.

        Missing or zero width/height default to 1.

        Raises:
            KeyError, TypeError, ValueError, OverflowError: If the document is
                malformed (OverflowError for non-finite numbers)
        """
        position = data["gridPosition"]
        return cls(
            id=str(data["id"]),
            kind=WindowKind(data["type"]),
            row=int(position["row"]),
            anchor_col=int(position["col"]),
            width=int(position.get("width") or 1),
            height=int(position.get("height") or 1),
        )


def snapshot(placements: List[WindowPlacement]) -> List[Dict[str, Any]]:
    """Serialize a placement collection into independent dicts."""
    return [p.to_dict() for p in placements]
