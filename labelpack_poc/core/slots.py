"""
Slot filling and balancing shared by all layout strategies.

An ``ItemSlot`` is the ``(item_id, quantity, needs_rotation)`` triple a
strategy wants printed in one run; the helpers here turn a list of them into
exactly ``total_slots`` assignments and into finished runs.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from typing import Deque, Dict, List, Sequence, Tuple

from labelpack_poc.core.geometry import actual_labels_per_slot, calculate_frames_for_slot, calculate_meters
from labelpack_poc.models.layout import ProposedRun, SlotAssignment, SlotConfig


logger = logging.getLogger(__name__)

DEFAULT_MAX_OVERRUN = 250  # labels a slot may over-print relative to its siblings

ItemSlot = Tuple[str, int, bool]


def fill_all_slots(item_slots: Sequence[ItemSlot], total_slots: int) -> List[SlotAssignment]:
    """
    Assign every physical slot, repeating items round-robin when there are
    fewer items than slots.

    An item that lands in ``k`` slots gets ``ceil(quantity / k)`` labels in
    each, so its total never falls short of the request.
    """
    if not item_slots:
        return []

    sources = [item_slots[s % len(item_slots)] for s in range(total_slots)]
    occupancy: Dict[str, int] = {}
    for item_id, _, _ in sources:
        occupancy[item_id] = occupancy.get(item_id, 0) + 1

    return [
        SlotAssignment(
            slot=slot,
            item_id=item_id,
            quantity_in_slot=math.ceil(quantity / occupancy[item_id]),
            needs_rotation=needs_rotation,
        )
        for slot, (item_id, quantity, needs_rotation) in enumerate(sources)
    ]


def build_run(run_number: int, assignments: Sequence[SlotAssignment], config: SlotConfig) -> ProposedRun:
    """Create a run whose length is driven by its heaviest slot."""
    max_slot_qty = max((a.quantity_in_slot for a in assignments), default=0)
    frames = max(1, calculate_frames_for_slot(max_slot_qty, config))
    return ProposedRun(
        run_number=run_number,
        slot_assignments=tuple(assignments),
        frames=frames,
        meters=calculate_meters(frames, config),
    )


def item_demands(assignments: Sequence[SlotAssignment]) -> List[ItemSlot]:
    """
    Collapse round-robin duplicates back into one demand per item.

    Order follows each item's first slot. Blank slots are dropped.
    """
    totals: Dict[str, int] = {}
    rotation: Dict[str, bool] = {}
    for assignment in assignments:
        if assignment.item_id is None:
            continue
        totals[assignment.item_id] = totals.get(assignment.item_id, 0) + assignment.quantity_in_slot
        rotation.setdefault(assignment.item_id, assignment.needs_rotation)
    return [(item_id, quantity, rotation[item_id]) for item_id, quantity in totals.items()]


def demand_imbalance(demands: Sequence[ItemSlot]) -> int:
    """
    Spread between the largest and smallest per-item total.

    The comparison is on item totals, not per-slot output: an item repeated
    across slots may still over-print past ``max_overrun`` in each of them,
    which the roll annotator reports as an overrun warning.
    """
    if not demands:
        return 0
    quantities = [quantity for _, quantity, _ in demands]
    return max(quantities) - min(quantities)


def validate_run_overrun(
    assignments: Sequence[SlotAssignment],
    config: SlotConfig,
    max_overrun: int = DEFAULT_MAX_OVERRUN,
) -> bool:
    """
    Check that the frame-quantised output of a run does not exceed any
    slot's request by more than ``max_overrun`` labels.
    """
    if not assignments:
        return True
    max_slot_qty = max(a.quantity_in_slot for a in assignments)
    actual = actual_labels_per_slot(max(1, calculate_frames_for_slot(max_slot_qty, config)), config)
    return all(actual - a.quantity_in_slot <= max_overrun for a in assignments if not a.is_blank)


def balance_slot_quantities(
    assignments: Sequence[SlotAssignment],
    config: SlotConfig,
    start_run_number: int = 1,
    max_overrun: int = DEFAULT_MAX_OVERRUN,
) -> List[ProposedRun]:
    """
    Split an unbalanced assignment into a capped run plus remainder runs.

    When the spread between the largest and smallest item demand exceeds
    ``max_overrun``, every item is capped at the smallest demand for this run
    and the surplus is re-filled and re-balanced as the following run(s).
    """
    runs: List[ProposedRun] = []
    queue: Deque[Tuple[List[SlotAssignment], List[ItemSlot]]] = deque()
    queue.append((list(assignments), item_demands(assignments)))
    run_number = start_run_number

    while queue:
        filled, demands = queue.popleft()
        if not demands:
            continue

        if demand_imbalance(demands) <= max_overrun:
            runs.append(build_run(run_number, filled, config))
            run_number += 1
            continue

        floor_qty = min(quantity for _, quantity, _ in demands)
        capped = [(item_id, floor_qty, rotation) for item_id, _, rotation in demands]
        remainder = [
            (item_id, quantity - floor_qty, rotation)
            for item_id, quantity, rotation in demands
            if quantity > floor_qty
        ]
        logger.debug(
            "Run %d unbalanced (spread %d > %d); capping at %d, %d item(s) carried over",
            run_number,
            demand_imbalance(demands),
            max_overrun,
            floor_qty,
            len(remainder),
        )
        runs.append(build_run(run_number, fill_all_slots(capped, config.total_slots), config))
        run_number += 1
        queue.append((fill_all_slots(remainder, config.total_slots), remainder))

    return runs
