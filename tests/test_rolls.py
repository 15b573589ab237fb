from __future__ import annotations

from labelpack_poc.core.rolls import (
    ROLL_TOLERANCE,
    annotate_runs_with_roll_info,
    consolidate_short_runs,
    is_short_run,
    suggest_roll_splits,
)
from labelpack_poc.core.slots import build_run
from labelpack_poc.models.layout import SlotAssignment


def _run(run_number, config, *slots):
    assignments = [
        SlotAssignment(slot=index, item_id=item_id, quantity_in_slot=quantity)
        for index, (item_id, quantity) in enumerate(slots)
    ]
    return build_run(run_number, assignments, config)


def test_short_run_classification(round_config):
    assert ROLL_TOLERANCE == 50
    assert is_short_run(_run(1, round_config, ("a", 400), ("b", 400)), round_config, 1000)
    assert not is_short_run(_run(1, round_config, ("a", 950), ("b", 950)), round_config, 1000)


def test_short_run_is_absorbed_into_long_run(round_config):
    short = _run(1, round_config, ("a", 400), ("b", 400))
    long = _run(2, round_config, ("a", 1200), ("b", 1200))
    assert short.frames == 4
    assert long.frames == 12

    runs, absorbed = consolidate_short_runs([short, long], round_config, qty_per_roll=1000)

    assert absorbed == 1
    assert len(runs) == 1
    merged = runs[0]
    assert merged.run_number == 1
    assert [a.quantity_in_slot for a in merged.slot_assignments] == [1600, 1600]
    assert merged.frames == 16
    assert merged.meters == 16.0

    annotated = annotate_runs_with_roll_info(runs, round_config, qty_per_roll=1000)
    assert annotated[0].actual_labels_per_slot == 1600
    assert annotated[0].needs_rewinding is False


def test_absorption_matches_items_across_slot_positions(round_config):
    short = _run(1, round_config, ("b", 300), ("a", 200))
    long = _run(2, round_config, ("a", 1000), ("b", 1000))

    runs, _ = consolidate_short_runs([short, long], round_config, qty_per_roll=1000)

    assert [(a.item_id, a.quantity_in_slot) for a in runs[0].slot_assignments] == [("a", 1200), ("b", 1300)]


def test_unmatched_short_run_keeps_rewinding_suggestion(round_config):
    long = _run(1, round_config, ("a", 1200), ("b", 1200))
    mergeable = _run(2, round_config, ("a", 300), ("a", 300))
    orphan = _run(3, round_config, ("c", 200), ("c", 200))

    runs, absorbed = consolidate_short_runs([long, mergeable, orphan], round_config, qty_per_roll=1000)

    assert absorbed == 1
    assert [run.run_number for run in runs] == [1, 2]
    assert runs[0].quantity_by_item() == {"a": 1800, "b": 1200}
    assert runs[1].item_ids == {"c"}
    assert "manual rewinding" in runs[1].consolidation_suggestion
    assert runs[0].consolidation_suggestion is None


def test_no_absorption_returns_none(round_config):
    long = _run(1, round_config, ("a", 1200), ("b", 1200))
    orphan = _run(2, round_config, ("c", 200), ("c", 200))
    assert consolidate_short_runs([long, orphan], round_config, qty_per_roll=1000) is None


def test_annotation_flags_rewinding_and_overrun(round_config):
    runs = [
        _run(1, round_config, ("a", 1000), ("b", 600)),
        _run(2, round_config, ("c", 300), ("c", 300)),
    ]
    annotated = annotate_runs_with_roll_info(runs, round_config, qty_per_roll=1000, max_overrun=250)

    first, second = annotated
    assert first.actual_labels_per_slot == 1000
    assert first.needs_rewinding is False
    assert first.overrun_warning == "Overrun above 250 labels: slot 1 +400"
    assert second.actual_labels_per_slot == 300
    assert second.needs_rewinding is True
    assert second.overrun_warning is None


def test_annotation_without_roll_length(round_config):
    annotated = annotate_runs_with_roll_info([_run(1, round_config, ("a", 100), ("b", 100))], round_config)
    assert annotated[0].needs_rewinding is False
    assert annotated[0].roll_splits == ()


def test_annotation_ignores_blank_slots(round_config):
    run = _run(1, round_config, ("a", 500), (None, 0))
    annotated = annotate_runs_with_roll_info([run], round_config, max_overrun=0)
    assert annotated[0].overrun_warning is None


def test_annotation_attaches_roll_splits(round_config):
    run = _run(1, round_config, ("a", 2500), ("b", 2500))
    annotated = annotate_runs_with_roll_info([run], round_config, qty_per_roll=1000)
    assert [split.strategy for split in annotated[0].roll_splits] == ["fill_first", "even"]


def test_roll_splits_fill_first_merges_small_tail():
    options = suggest_roll_splits(1008, 500)
    assert options[0].strategy == "fill_first"
    assert options[0].rolls == (500, 508)
    assert options[1].strategy == "even"
    assert options[1].rolls == (504, 504)


def test_roll_splits_fold_small_tail_into_single_roll():
    options = suggest_roll_splits(1030, 1000)
    assert len(options) == 1
    assert options[0].strategy == "fill_first"
    assert options[0].rolls == (1030,)


def test_roll_splits_even_spreads_remainder():
    fill_first, even = suggest_roll_splits(2500, 1000)
    assert fill_first.rolls == (1000, 1000, 500)
    assert even.rolls == (834, 833, 833)
    assert sum(even.rolls) == 2500
    assert fill_first.label == "1,000 + 1,000 + 500"


def test_roll_splits_skip_identical_even_split():
    options = suggest_roll_splits(2000, 1000)
    assert [option.strategy for option in options] == ["fill_first"]
    assert options[0].rolls == (1000, 1000)


def test_no_split_when_output_fits_one_roll():
    assert suggest_roll_splits(900, 1000) == ()
    assert suggest_roll_splits(1000, 1000) == ()
