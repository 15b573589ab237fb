"""
Roll awareness: frame-quantised output, rewinding flags, short-run
consolidation and roll split suggestions.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from labelpack_poc.core.geometry import actual_labels_per_slot
from labelpack_poc.core.slots import DEFAULT_MAX_OVERRUN, build_run
from labelpack_poc.models.layout import ProposedRun, RollSplitOption, SlotAssignment, SlotConfig


logger = logging.getLogger(__name__)

ROLL_TOLERANCE = 50  # labels a roll may fall short before it needs rewinding


def is_short_run(run: ProposedRun, config: SlotConfig, qty_per_roll: int) -> bool:
    return actual_labels_per_slot(run.frames, config) < qty_per_roll - ROLL_TOLERANCE


def _absorb(target: ProposedRun, short: ProposedRun, config: SlotConfig) -> ProposedRun:
    quantities = [a.quantity_in_slot for a in target.slot_assignments]
    for assignment in short.slot_assignments:
        if assignment.item_id is None or assignment.quantity_in_slot == 0:
            continue
        slot = assignment.slot
        if slot >= len(quantities) or target.slot_assignments[slot].item_id != assignment.item_id:
            candidates = [a.slot for a in target.slot_assignments if a.item_id == assignment.item_id]
            slot = min(candidates, key=lambda index: quantities[index])
        quantities[slot] += assignment.quantity_in_slot

    merged = [replace(a, quantity_in_slot=quantities[a.slot]) for a in target.slot_assignments]
    return build_run(target.run_number, merged, config)


def consolidate_short_runs(
    runs: Sequence[ProposedRun],
    config: SlotConfig,
    qty_per_roll: int,
) -> Optional[Tuple[List[ProposedRun], int]]:
    """
    Absorb runs too short to fill a roll into a long run whose item set
    covers theirs.

    Short runs without a compatible long run are kept and carry a
    suggestion that they need manual rewinding. Returns the renumbered runs
    and the number of absorptions, or ``None`` when nothing was absorbed.
    """
    working: List[Optional[ProposedRun]] = list(runs)
    long_indices = [index for index, run in enumerate(runs) if not is_short_run(run, config, qty_per_roll)]
    absorbed = 0

    for index, run in enumerate(runs):
        if index in long_indices:
            continue
        target_index = next(
            (j for j in long_indices if run.item_ids <= working[j].item_ids),
            None,
        )
        if target_index is None:
            actual = actual_labels_per_slot(run.frames, config)
            working[index] = replace(
                run,
                consolidation_suggestion=(
                    f"No longer run prints the same items; {actual:,} labels per slot is below "
                    f"the {qty_per_roll:,} label roll, manual rewinding required"
                ),
            )
            continue
        logger.debug("Absorbing run %d into run %d", run.run_number, runs[target_index].run_number)
        working[target_index] = _absorb(working[target_index], run, config)
        working[index] = None
        absorbed += 1

    if absorbed == 0:
        return None
    kept = [run for run in working if run is not None]
    return [replace(run, run_number=number) for number, run in enumerate(kept, start=1)], absorbed


def suggest_roll_splits(actual_per_slot: int, qty_per_roll: int) -> Tuple[RollSplitOption, ...]:
    """
    Offer ways to cut a slot's output into finished rolls when it exceeds
    one roll.

    ``fill_first`` fills whole rolls and folds a tail of at most
    ``ROLL_TOLERANCE`` labels into the previous roll; ``even`` spreads the
    output over the same number of rolls and is only offered when it differs.
    """
    if qty_per_roll <= 0 or actual_per_slot <= qty_per_roll:
        return ()

    full_rolls, tail = divmod(actual_per_slot, qty_per_roll)
    fill_first = [qty_per_roll] * full_rolls
    if tail:
        fill_first.append(tail)
    if len(fill_first) >= 2 and fill_first[-1] <= ROLL_TOLERANCE:
        tail = fill_first.pop()
        fill_first[-1] += tail

    options = [RollSplitOption(strategy="fill_first", rolls=tuple(fill_first))]

    count = len(fill_first)
    base, extra = divmod(actual_per_slot, count)
    even = tuple(base + 1 if index < extra else base for index in range(count))
    if even[0] != fill_first[0]:
        options.append(RollSplitOption(strategy="even", rolls=even))
    return tuple(options)


def _overrun_warning(
    assignments: Sequence[SlotAssignment],
    actual: int,
    max_overrun: int,
) -> Optional[str]:
    overruns = [
        (a.slot, actual - a.quantity_in_slot)
        for a in assignments
        if not a.is_blank and actual - a.quantity_in_slot > max_overrun
    ]
    if not overruns:
        return None
    details = ", ".join(f"slot {slot} +{extra:,}" for slot, extra in overruns)
    return f"Overrun above {max_overrun:,} labels: {details}"


def annotate_runs_with_roll_info(
    runs: Sequence[ProposedRun],
    config: SlotConfig,
    qty_per_roll: Optional[int] = None,
    max_overrun: int = DEFAULT_MAX_OVERRUN,
) -> List[ProposedRun]:
    """Attach physical output, rewinding and overrun information to each run."""
    annotated: List[ProposedRun] = []
    for run in runs:
        actual = actual_labels_per_slot(run.frames, config)
        warning = _overrun_warning(run.slot_assignments, actual, max_overrun)
        if warning:
            logger.debug("Run %d: %s", run.run_number, warning)
        annotated.append(
            replace(
                run,
                actual_labels_per_slot=actual,
                needs_rewinding=bool(qty_per_roll) and actual < qty_per_roll - ROLL_TOLERANCE,
                overrun_warning=warning,
                roll_splits=suggest_roll_splits(actual, qty_per_roll) if qty_per_roll else (),
            )
        )
    return annotated
