"""
Result models shared by the layout strategies, the roll annotator and the
scorer.

Every model is a frozen dataclass; strategies build new instances with
``dataclasses.replace`` instead of mutating runs in place, so one option can
never leak state into another.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional, Tuple


@dataclass(frozen=True)
class SlotConfig:
    """Press geometry derived from a dieline. Never persisted."""

    total_slots: int
    labels_per_slot_per_frame: int
    labels_per_frame: int
    frames_per_meter: float
    templates_per_frame: int
    template_height_mm: float
    frame_height_mm: float

    def to_dict(self) -> Dict[str, float | int]:
        return {
            "total_slots": self.total_slots,
            "labels_per_slot_per_frame": self.labels_per_slot_per_frame,
            "labels_per_frame": self.labels_per_frame,
            "frames_per_meter": self.frames_per_meter,
            "templates_per_frame": self.templates_per_frame,
            "template_height_mm": self.template_height_mm,
            "frame_height_mm": self.frame_height_mm,
        }


@dataclass(frozen=True)
class SlotAssignment:
    """One lateral slot of a run and the labels it must deliver."""

    slot: int
    item_id: Optional[str]
    quantity_in_slot: int
    needs_rotation: bool = field(default=False)

    @property
    def is_blank(self) -> bool:
        return self.item_id is None

    def as_dict(self) -> dict:
        return {
            "slot": self.slot,
            "item_id": self.item_id,
            "quantity_in_slot": self.quantity_in_slot,
            "needs_rotation": self.needs_rotation,
        }


@dataclass(frozen=True)
class RollSplitOption:
    """A way to cut one slot's output into finished rolls."""

    strategy: str
    rolls: Tuple[int, ...]

    @property
    def label(self) -> str:
        return " + ".join(f"{count:,}" for count in self.rolls)

    def as_dict(self) -> dict:
        return {"strategy": self.strategy, "rolls": list(self.rolls), "label": self.label}


@dataclass(frozen=True)
class ProposedRun:
    """A single press pass with fixed slot assignments."""

    run_number: int
    slot_assignments: Tuple[SlotAssignment, ...]
    frames: int
    meters: float
    actual_labels_per_slot: Optional[int] = field(default=None)
    needs_rewinding: bool = field(default=False)
    consolidation_suggestion: Optional[str] = field(default=None)
    overrun_warning: Optional[str] = field(default=None)
    roll_splits: Tuple[RollSplitOption, ...] = field(default=())

    @property
    def item_ids(self) -> FrozenSet[str]:
        """Return the distinct items printed by this run (blank slots excluded)."""
        return frozenset(a.item_id for a in self.slot_assignments if a.item_id is not None)

    @property
    def blank_slots(self) -> int:
        return sum(1 for a in self.slot_assignments if a.is_blank)

    def quantity_by_item(self) -> Dict[str, int]:
        totals: Dict[str, int] = {}
        for assignment in self.slot_assignments:
            if assignment.item_id is None:
                continue
            totals[assignment.item_id] = totals.get(assignment.item_id, 0) + assignment.quantity_in_slot
        return totals

    def to_dict(self) -> dict:
        return {
            "run_number": self.run_number,
            "slot_assignments": [a.as_dict() for a in self.slot_assignments],
            "frames": self.frames,
            "meters": self.meters,
            "actual_labels_per_slot": self.actual_labels_per_slot,
            "needs_rewinding": self.needs_rewinding,
            "consolidation_suggestion": self.consolidation_suggestion,
            "overrun_warning": self.overrun_warning,
            "roll_splits": [split.as_dict() for split in self.roll_splits],
        }


@dataclass(frozen=True)
class OptimizationWeights:
    """Caller supplied weights for the overall score (weighted sum)."""

    material_efficiency: float = field(default=1 / 3)
    print_efficiency: float = field(default=1 / 3)
    labor_efficiency: float = field(default=1 / 3)

    def to_dict(self) -> Dict[str, float]:
        return {
            "material_efficiency": self.material_efficiency,
            "print_efficiency": self.print_efficiency,
            "labor_efficiency": self.labor_efficiency,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "OptimizationWeights":
        defaults = cls()
        return cls(
            material_efficiency=float(payload.get("material_efficiency", defaults.material_efficiency)),
            print_efficiency=float(payload.get("print_efficiency", defaults.print_efficiency)),
            labor_efficiency=float(payload.get("labor_efficiency", defaults.labor_efficiency)),
        )


@dataclass(frozen=True)
class LayoutOption:
    """One scored candidate layout produced by a strategy."""

    id: str
    runs: Tuple[ProposedRun, ...]
    total_meters: float
    total_frames: int
    total_waste_meters: float
    material_efficiency_score: float
    print_efficiency_score: float
    labor_efficiency_score: float
    overall_score: float
    reasoning: str
    production_minutes: float = field(default=0.0)

    @property
    def run_count(self) -> int:
        return len(self.runs)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "runs": [run.to_dict() for run in self.runs],
            "total_meters": self.total_meters,
            "total_frames": self.total_frames,
            "total_waste_meters": self.total_waste_meters,
            "material_efficiency_score": self.material_efficiency_score,
            "print_efficiency_score": self.print_efficiency_score,
            "labor_efficiency_score": self.labor_efficiency_score,
            "overall_score": self.overall_score,
            "reasoning": self.reasoning,
            "production_minutes": self.production_minutes,
        }


@dataclass(frozen=True)
class LayoutValidation:
    """Outcome of checking that an option covers every requested quantity."""

    valid: bool
    errors: Tuple[str, ...] = field(default=())
    warnings: Tuple[str, ...] = field(default=())
