"""
Data model representing a die-cut label template.

All lengths are in millimetres (mm). Slot and row counts are only coerced
here; whether they describe a printable frame is decided by the geometry
resolver so that every geometry failure surfaces as the same error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from labelpack_poc.core.errors import InvalidGeometryError


def _require_non_negative(name: str, value: Optional[float]) -> float:
    if value is None:
        return 0.0
    if value < 0:
        raise InvalidGeometryError(f"{name} cannot be negative, got {value!r}")
    return float(value)


@dataclass(frozen=True)
class LabelDieline:
    """Immutable dieline geometry used for one optimisation call."""

    columns_across: int
    rows_around: int
    label_width_mm: float
    label_height_mm: float
    vertical_gap_mm: float = field(default=0)
    roll_width_mm: float = field(default=0)
    bleed_top_mm: Optional[float] = field(default=0)
    bleed_bottom_mm: Optional[float] = field(default=0)
    horizontal_gap_mm: float = field(default=0)
    name: str = field(default="Dieline")

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns_across", int(self.columns_across))
        object.__setattr__(self, "rows_around", int(self.rows_around))
        object.__setattr__(self, "label_width_mm", float(self.label_width_mm))
        object.__setattr__(self, "label_height_mm", float(self.label_height_mm))
        object.__setattr__(self, "roll_width_mm", float(self.roll_width_mm))
        object.__setattr__(self, "vertical_gap_mm", _require_non_negative("vertical_gap_mm", self.vertical_gap_mm))
        object.__setattr__(self, "horizontal_gap_mm", _require_non_negative("horizontal_gap_mm", self.horizontal_gap_mm))
        # Bleed columns are nullable in the template catalog.
        object.__setattr__(self, "bleed_top_mm", _require_non_negative("bleed_top_mm", self.bleed_top_mm))
        object.__setattr__(self, "bleed_bottom_mm", _require_non_negative("bleed_bottom_mm", self.bleed_bottom_mm))

    @property
    def template_height_mm(self) -> float:
        """Return the height of one template repeat including gaps and bleed."""
        return (
            self.rows_around * self.label_height_mm
            + (self.rows_around - 1) * self.vertical_gap_mm
            + self.bleed_top_mm
            + self.bleed_bottom_mm
        )

    @property
    def labels_per_template(self) -> int:
        return self.columns_across * self.rows_around

    def to_dict(self) -> Dict[str, float | int | str]:
        return {
            "name": self.name,
            "columns_across": self.columns_across,
            "rows_around": self.rows_around,
            "label_width_mm": self.label_width_mm,
            "label_height_mm": self.label_height_mm,
            "vertical_gap_mm": self.vertical_gap_mm,
            "horizontal_gap_mm": self.horizontal_gap_mm,
            "bleed_top_mm": self.bleed_top_mm,
            "bleed_bottom_mm": self.bleed_bottom_mm,
            "roll_width_mm": self.roll_width_mm,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "LabelDieline":
        """Instantiate from a raw template catalog entry."""
        return cls(
            name=str(payload.get("name", "Dieline")),
            columns_across=int(payload["columns_across"]),
            rows_around=int(payload["rows_around"]),
            label_width_mm=float(payload["label_width_mm"]),
            label_height_mm=float(payload["label_height_mm"]),
            vertical_gap_mm=float(payload.get("vertical_gap_mm") or 0),
            horizontal_gap_mm=float(payload.get("horizontal_gap_mm") or 0),
            bleed_top_mm=payload.get("bleed_top_mm"),
            bleed_bottom_mm=payload.get("bleed_bottom_mm"),
            roll_width_mm=float(payload.get("roll_width_mm") or 0),
        )
