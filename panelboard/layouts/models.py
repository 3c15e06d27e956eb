"""
Data model for dashboard layouts.

A layout snapshot maps each panel key to a PanelData holding an ordered list
of widgets. Widgets optionally carry a GridPosition on the interactive grid.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

DEFAULT_WIDGET_COLOR = "#00d563"

_POSITION_RE = re.compile(r"^\s*(\d+)\s*/\s*(\d+)\s*/\s*(\d+)\s*/\s*(\d+)\s*$")


class WidgetSize(str, Enum):
    """Display size of a widget within its panel."""

    STANDARD = "standard"
    LARGE = "large"
    SMALL = "small"

    @classmethod
    def from_flags(cls, large: bool, small: bool) -> "WidgetSize":
        # Large wins when both flags are set
        if large:
            return cls.LARGE
        if small:
            return cls.SMALL
        return cls.STANDARD

    @property
    def is_large(self) -> bool:
        return self is WidgetSize.LARGE

    @property
    def is_small(self) -> bool:
        return self is WidgetSize.SMALL


@dataclass(frozen=True)
class GridPosition:
    """
    Rectangular region of the grid in 1-based coordinates.

    Start is inclusive and end is exclusive, matching the CSS grid-area
    shorthand "row-start / col-start / row-end / col-end".

    Attributes:
        start_row: First row covered
        start_col: First column covered
        end_row: Row line where the region stops (exclusive)
        end_col: Column line where the region stops (exclusive)
    """

    start_row: int
    start_col: int
    end_row: int
    end_col: int

    def __post_init__(self):
        for name in ("start_row", "start_col", "end_row", "end_col"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if self.end_row <= self.start_row:
            raise ValueError(f"end_row ({self.end_row}) must exceed start_row ({self.start_row})")
        if self.end_col <= self.start_col:
            raise ValueError(f"end_col ({self.end_col}) must exceed start_col ({self.start_col})")

    @classmethod
    def from_anchor(cls, row: int, col: int, width: int, height: int) -> "GridPosition":
        """Build a position from its top-left cell and its size in cells."""
        return cls(row, col, row + height, col + width)

    @classmethod
    def parse(cls, text: str) -> "GridPosition":
        """Parse the "r1 / c1 / r2 / c2" form."""
        if not isinstance(text, str):
            raise ValueError(f"Grid position must be a string, got {type(text).__name__}")
        match = _POSITION_RE.match(text)
        if match is None:
            raise ValueError(f"Invalid grid position: {text!r}")
        return cls(*(int(part) for part in match.groups()))

    @property
    def width(self) -> int:
        return self.end_col - self.start_col

    @property
    def height(self) -> int:
        return self.end_row - self.start_row

    def overlaps(self, other: "GridPosition") -> bool:
        """True if both the row ranges and the column ranges intersect."""
        return not (
            self.end_row <= other.start_row
            or self.start_row >= other.end_row
            or self.end_col <= other.start_col
            or self.start_col >= other.end_col
        )

    def fits(self, rows: int, cols: int) -> bool:
        """True if the region lies inside a rows x cols grid."""
        return self.end_row <= rows + 1 and self.end_col <= cols + 1

    def cells(self) -> Iterator[Tuple[int, int]]:
        """Iterate over every (row, col) cell covered, row-major."""
        for row in range(self.start_row, self.end_row):
            for col in range(self.start_col, self.end_col):
                yield row, col

    def __str__(self) -> str:
        return f"{self.start_row} / {self.start_col} / {self.end_row} / {self.end_col}"


@dataclass
class Widget:
    """
    A content card within a panel.

    `id` is generated by the client and is distinct from the storage row id.
    """

    id: int
    title: str
    content: str = ""
    color: str = DEFAULT_WIDGET_COLOR
    size: WidgetSize = WidgetSize.STANDARD
    position: Optional[GridPosition] = None


@dataclass
class PanelData:
    """A named panel and its ordered widgets."""

    title: str
    widgets: List[Widget] = field(default_factory=list)

    def find_widget(self, widget_id: int) -> Optional[Widget]:
        for widget in self.widgets:
            if widget.id == widget_id:
                return widget
        return None


# panel_key -> PanelData, insertion order is significant
LayoutSnapshot = Dict[str, PanelData]
