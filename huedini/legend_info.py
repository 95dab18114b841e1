"""Containers for detected legend colors."""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from .utils import BBox, Color, bbox_union

DEFAULT_LABEL = "Unknown"


@dataclass(frozen=True)
class LegendColorEntry:
    """One legend element: its RGB color, bounding box and label."""
    color: Color
    bounding_box: BBox
    label: str = DEFAULT_LABEL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "color": list(self.color),
            "bounding_box": list(self.bounding_box),
            "label": self.label,
        }

    def __str__(self) -> str:
        r, g, b = self.color
        x, y, w, h = self.bounding_box
        return f"Color: RGB:({r}, {g}, {b}), Bounds: ({x}, {y}, {w}, {h}), Label: {self.label}"


class LegendInfo:
    """Ordered, append-only collection of legend entries for one image.

    The legend bounding box can be set explicitly; otherwise it is the
    union of all entry boxes.
    """

    def __init__(self) -> None:
        self._entries: List[LegendColorEntry] = []
        self._legend_bounding_box: Optional[BBox] = None

    def add_legend_color(self, color: Color, bounding_box: BBox, label: str = DEFAULT_LABEL) -> LegendColorEntry:
        entry = LegendColorEntry(
            color=tuple(int(c) for c in color),
            bounding_box=BBox(*(int(v) for v in bounding_box)),
            label=label,
        )
        self._entries.append(entry)
        return entry

    @property
    def legend_colors(self) -> List[LegendColorEntry]:
        return list(self._entries)

    @property
    def legend_bounding_box(self) -> Optional[BBox]:
        if self._legend_bounding_box is not None:
            return self._legend_bounding_box
        return bbox_union(e.bounding_box for e in self._entries)

    @legend_bounding_box.setter
    def legend_bounding_box(self, bbox: Optional[BBox]) -> None:
        self._legend_bounding_box = BBox(*bbox) if bbox is not None else None

    def to_dict(self) -> Dict[str, Any]:
        bbox = self.legend_bounding_box
        return {
            "legend_bounding_box": list(bbox) if bbox is not None else None,
            "legend_colors": [e.to_dict() for e in self._entries],
        }

    def __iter__(self) -> Iterator[LegendColorEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"LegendInfo({len(self._entries)} colors)"
