"""
Scoring of layout options and production estimates.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Dict, List, Sequence

from labelpack_poc.core.errors import InvalidRequestError
from labelpack_poc.core.geometry import calculate_meters
from labelpack_poc.models.item import LabelItem
from labelpack_poc.models.layout import LayoutOption, LayoutValidation, OptimizationWeights, ProposedRun, SlotConfig


MAKE_READY_FIRST_MIN = 20  # charged once per order, not per run
INK_SPEEDS_M_PER_MIN: Dict[str, float] = {
    "CMY": 40.0,
    "CMYK": 30.0,
    "CMYKW": 20.0,
    "CMYKO": 20.0,
}
DEFAULT_INK_CONFIG = "CMYK"

PRINT_RUN_PENALTY = 0.1
LABOR_RUN_PENALTY = 0.15
REWINDING_PENALTY = 0.4


def theoretical_min_meters(items: Sequence[LabelItem], config: SlotConfig) -> float:
    """Return the meters needed if every slot of every frame were used exactly."""
    total_labels = sum(item.quantity for item in items)
    return calculate_meters(math.ceil(total_labels / config.labels_per_frame), config)


def calculate_production_time(total_meters: float, ink_config: str = DEFAULT_INK_CONFIG) -> float:
    """Return estimated press minutes: one make-ready plus printing time."""
    try:
        speed = INK_SPEEDS_M_PER_MIN[ink_config]
    except KeyError:
        raise InvalidRequestError(
            f"ink_config must be one of {sorted(INK_SPEEDS_M_PER_MIN)}, got {ink_config!r}"
        ) from None
    return round(MAKE_READY_FIRST_MIN + total_meters / speed, 1)


def score_layout(option: LayoutOption, weights: OptimizationWeights) -> float:
    return (
        option.material_efficiency_score * weights.material_efficiency
        + option.print_efficiency_score * weights.print_efficiency
        + option.labor_efficiency_score * weights.labor_efficiency
    )


def _labor_efficiency(runs: Sequence[ProposedRun], config: SlotConfig, blank_slot_penalty: float) -> float:
    run_count = len(runs)
    score = 1 / (1 + LABOR_RUN_PENALTY * run_count)
    if run_count:
        rewinding_fraction = sum(1 for run in runs if run.needs_rewinding) / run_count
        score *= 1 - REWINDING_PENALTY * rewinding_fraction
        if blank_slot_penalty:
            blank_fraction = sum(run.blank_slots for run in runs) / (run_count * config.total_slots)
            score *= max(0.0, 1 - blank_slot_penalty * blank_fraction)
    return score


def create_layout_option(
    option_id: str,
    runs: Sequence[ProposedRun],
    config: SlotConfig,
    theoretical_min: float,
    reasoning: str,
    weights: OptimizationWeights,
    ink_config: str = DEFAULT_INK_CONFIG,
    blank_slot_penalty: float = 0.0,
) -> LayoutOption:
    """
    Aggregate a strategy's runs into a scored option.

    Material efficiency compares printed meters with the theoretical minimum,
    print and labor efficiency fall with the number of runs, and labor is
    reduced by up to 40% for runs that need manual rewinding.
    """
    total_meters = round(sum(run.meters for run in runs), 2)
    total_frames = sum(run.frames for run in runs)
    waste_meters = max(0.0, total_meters - theoretical_min)
    material = max(0.0, 1 - waste_meters / total_meters) if total_meters > 0 else 0.0

    option = LayoutOption(
        id=option_id,
        runs=tuple(runs),
        total_meters=total_meters,
        total_frames=total_frames,
        total_waste_meters=round(waste_meters, 2),
        material_efficiency_score=material,
        print_efficiency_score=1 / (1 + PRINT_RUN_PENALTY * len(runs)),
        labor_efficiency_score=_labor_efficiency(runs, config, blank_slot_penalty),
        overall_score=0.0,
        reasoning=reasoning,
        production_minutes=calculate_production_time(total_meters, ink_config),
    )
    return _with_score(option, weights)


def _with_score(option: LayoutOption, weights: OptimizationWeights) -> LayoutOption:
    return replace(option, overall_score=score_layout(option, weights))


def describe_runs(description: str, runs: Sequence[ProposedRun], total_labels: int) -> str:
    """Compose the human readable reasoning shown next to an option."""
    total_meters = sum(run.meters for run in runs)
    total_frames = sum(run.frames for run in runs)
    parts = [
        description,
        f"{len(runs)} run{'s' if len(runs) != 1 else ''} printing {total_labels:,} labels",
        f"{total_meters:.1f}m of substrate ({total_frames} frames)",
    ]
    rewinding = sum(1 for run in runs if run.needs_rewinding)
    if rewinding:
        parts.append(f"{rewinding} run{'s' if rewinding != 1 else ''} need manual rewinding")
    if len(runs) == 1:
        parts.append("Single-run simplicity")
    return ". ".join(parts) + "."


def format_layout_summary(option: LayoutOption) -> str:
    return (
        f"{option.run_count} run(s), {option.total_meters:.1f}m total, "
        f"{option.total_waste_meters:.1f}m waste, {round(option.overall_score * 100)}% score"
    )


def validate_layout(option: LayoutOption, items: Sequence[LabelItem]) -> LayoutValidation:
    """
    Check that an option prints at least the requested quantity of every
    item. Over-assignment from rounding is reported as a warning only.
    """
    assigned: Dict[str, int] = {}
    for run in option.runs:
        for item_id, quantity in run.quantity_by_item().items():
            assigned[item_id] = assigned.get(item_id, 0) + quantity

    errors: List[str] = []
    warnings: List[str] = []
    for item in items:
        total = assigned.pop(item.id, 0)
        if total < item.quantity:
            errors.append(f"{item.name}: missing {item.quantity - total:,} labels")
        elif total > item.quantity:
            warnings.append(f"{item.name}: over-assigned by {total - item.quantity:,} labels")
    for item_id in assigned:
        errors.append(f"{item_id}: assigned but not part of the order")

    return LayoutValidation(valid=not errors, errors=tuple(errors), warnings=tuple(warnings))
