"""
Layout strategies turning an item list into proposed runs.

Each strategy is a pure function of ``(items, config, params)``. They share
nothing but the read-only inputs and can be evaluated in any order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from labelpack_poc.core.rolls import consolidate_short_runs
from labelpack_poc.core.slots import (
    DEFAULT_MAX_OVERRUN,
    ItemSlot,
    balance_slot_quantities,
    build_run,
    demand_imbalance,
    fill_all_slots,
    validate_run_overrun,
)
from labelpack_poc.models.item import LabelItem
from labelpack_poc.models.layout import ProposedRun, SlotAssignment, SlotConfig


logger = logging.getLogger(__name__)

Demand = Tuple[Tuple[LabelItem, int], ...]


@dataclass(frozen=True)
class StrategyParams:
    max_overrun: int = field(default=DEFAULT_MAX_OVERRUN)
    qty_per_roll: Optional[int] = field(default=None)


def _item_slots(items: Sequence[LabelItem]) -> List[ItemSlot]:
    return [(item.id, item.quantity, item.needs_rotation) for item in items]


def _blank_slot(slot: int) -> SlotAssignment:
    return SlotAssignment(slot=slot, item_id=None, quantity_in_slot=0)


# ─── Ganged ────────────────────────────────────────────────────────────


def create_ganged_runs(
    items: Sequence[LabelItem],
    config: SlotConfig,
    max_overrun: int = DEFAULT_MAX_OVERRUN,
) -> List[ProposedRun]:
    """Print every item side by side; only valid when each gets a slot."""
    if not items or len(items) > config.total_slots:
        return []
    assignments = fill_all_slots(_item_slots(items), config.total_slots)
    return balance_slot_quantities(assignments, config, start_run_number=1, max_overrun=max_overrun)


# ─── Individual ────────────────────────────────────────────────────────


def create_single_item_run(item: LabelItem, run_number: int, config: SlotConfig) -> ProposedRun:
    """Fill every slot with one item, dividing its quantity evenly."""
    assignments = fill_all_slots(_item_slots([item]), config.total_slots)
    return build_run(run_number, assignments, config)


def create_individual_runs(items: Sequence[LabelItem], config: SlotConfig) -> List[ProposedRun]:
    return [create_single_item_run(item, index, config) for index, item in enumerate(items, start=1)]


# ─── Optimized ─────────────────────────────────────────────────────────


def _largest_valid_batch(
    compatible: Sequence[LabelItem],
    config: SlotConfig,
    max_overrun: int,
) -> Optional[Tuple[Tuple[LabelItem, ...], List[SlotAssignment]]]:
    for size in range(min(len(compatible), config.total_slots), 0, -1):
        batch = tuple(compatible[:size])
        demands = _item_slots(batch)
        if demand_imbalance(demands) > max_overrun:
            continue
        assignments = fill_all_slots(demands, config.total_slots)
        if validate_run_overrun(assignments, config, max_overrun):
            return batch, assignments
    return None


def create_optimized_runs(
    items: Sequence[LabelItem],
    config: SlotConfig,
    max_overrun: int = DEFAULT_MAX_OVERRUN,
) -> List[ProposedRun]:
    """
    Greedy anchor-based grouping.

    The largest unassigned item anchors each run; the biggest batch of items
    within ``max_overrun`` of it that also keeps the frame-quantised overrun
    in bounds is printed together. If no batch qualifies the anchor gets a
    run of its own.
    """
    runs: List[ProposedRun] = []
    unassigned: Tuple[LabelItem, ...] = tuple(sorted(items, key=lambda item: item.quantity, reverse=True))

    while unassigned:
        anchor = unassigned[0]
        compatible = [item for item in unassigned if anchor.quantity - item.quantity <= max_overrun]
        run_number = len(runs) + 1
        found = _largest_valid_batch(compatible, config, max_overrun)
        if found is None:
            logger.debug("No valid batch for anchor %s; printing it alone", anchor.id)
            committed: Tuple[LabelItem, ...] = (anchor,)
            runs.append(create_single_item_run(anchor, run_number, config))
        else:
            committed, assignments = found
            runs.append(build_run(run_number, assignments, config))
        committed_ids = {item.id for item in committed}
        unassigned = tuple(item for item in unassigned if item.id not in committed_ids)

    return runs


# ─── Equal quantity ────────────────────────────────────────────────────


def _deduct(demand: Demand, item_ids: set, amount: int) -> Demand:
    return tuple(
        (item, remaining - amount if item.id in item_ids else remaining)
        for item, remaining in demand
    )


def _level_assignments(batch: Sequence[Tuple[LabelItem, int]], total_slots: int) -> List[SlotAssignment]:
    assignments = [
        SlotAssignment(slot=slot, item_id=item.id, quantity_in_slot=quantity, needs_rotation=item.needs_rotation)
        for slot, (item, quantity) in enumerate(batch)
    ]
    assignments.extend(_blank_slot(slot) for slot in range(len(batch), total_slots))
    return assignments


def create_equal_quantity_runs(items: Sequence[LabelItem], config: SlotConfig) -> List[ProposedRun]:
    """
    Cluster slots by quantity level.

    Every non-blank slot of a run carries the same quantity, which trades
    extra runs (and blank slots) for zero intra-run overrun.
    """
    demand: Demand = tuple((item, item.quantity) for item in items)
    levels = sorted({item.quantity for item in items}, reverse=True)
    runs: List[ProposedRun] = []

    for level in levels:
        while True:
            eligible = [item for item, remaining in demand if remaining >= level][: config.total_slots]
            if not eligible:
                break
            batch = [(item, level) for item in eligible]
            runs.append(build_run(len(runs) + 1, _level_assignments(batch, config.total_slots), config))
            demand = _deduct(demand, {item.id for item in eligible}, level)

    leftovers = [(item, remaining) for item, remaining in demand if remaining > 0]
    for start in range(0, len(leftovers), config.total_slots):
        batch = leftovers[start : start + config.total_slots]
        runs.append(build_run(len(runs) + 1, _level_assignments(batch, config.total_slots), config))

    return runs


# ─── Roll optimised ────────────────────────────────────────────────────


def create_roll_optimized_runs(
    items: Sequence[LabelItem],
    config: SlotConfig,
    max_overrun: int = DEFAULT_MAX_OVERRUN,
    qty_per_roll: Optional[int] = None,
) -> List[ProposedRun]:
    """
    Fold short optimised runs into longer runs printing the same items.

    Returns an empty list when no roll length is configured or nothing could
    be absorbed, since the layout would then duplicate the optimised option.
    """
    if not qty_per_roll:
        return []
    # Optimized runs never split an item, so their item sets are disjoint and a
    # short run finds no superset to join; this normally returns [].
    consolidated = consolidate_short_runs(create_optimized_runs(items, config, max_overrun), config, qty_per_roll)
    if consolidated is None:
        return []
    runs, absorbed = consolidated
    logger.debug("Roll consolidation absorbed %d short run(s)", absorbed)
    return runs


# ─── Registry ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class LayoutStrategy:
    """A named generator with the text explaining its trade-off."""

    tag: str
    description: str
    generate: Callable[[Sequence[LabelItem], SlotConfig, StrategyParams], List[ProposedRun]]


STRATEGIES: Tuple[LayoutStrategy, ...] = (
    LayoutStrategy(
        tag="ganged",
        description="All items ganged side by side, split into extra runs only where quantities diverge",
        generate=lambda items, config, params: create_ganged_runs(items, config, params.max_overrun),
    ),
    LayoutStrategy(
        tag="individual",
        description="Each item on its own run with every slot filled, maximum control over quantities",
        generate=lambda items, config, params: create_individual_runs(items, config),
    ),
    LayoutStrategy(
        tag="optimized",
        description="Items with similar quantities ganged together, outliers moved to their own runs",
        generate=lambda items, config, params: (
            create_optimized_runs(items, config, params.max_overrun) if len(items) > 1 else []
        ),
    ),
    LayoutStrategy(
        tag="equal-quantity",
        description="Slots grouped by identical quantity so no slot over-prints its neighbours",
        generate=lambda items, config, params: create_equal_quantity_runs(items, config),
    ),
    LayoutStrategy(
        tag="roll-optimized",
        description="Optimised layout with short runs folded into longer runs of the same items to fill rolls",
        generate=lambda items, config, params: create_roll_optimized_runs(
            items, config, params.max_overrun, params.qty_per_roll
        ),
    ),
)


def get_strategy(tag: str) -> LayoutStrategy:
    for strategy in STRATEGIES:
        if strategy.tag == tag:
            return strategy
    raise KeyError(f"unknown layout strategy {tag!r}")
