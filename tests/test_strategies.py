from __future__ import annotations

import pytest

from labelpack_poc.core.geometry import get_slot_config
from labelpack_poc.core.rolls import annotate_runs_with_roll_info
from labelpack_poc.core.strategies import (
    STRATEGIES,
    StrategyParams,
    create_equal_quantity_runs,
    create_ganged_runs,
    create_individual_runs,
    create_optimized_runs,
    create_roll_optimized_runs,
    create_single_item_run,
    get_strategy,
)
from labelpack_poc.models.dieline import LabelDieline
from labelpack_poc.models.item import LabelItem

from conftest import make_items


def _totals(runs):
    totals = {}
    for run in runs:
        for item_id, quantity in run.quantity_by_item().items():
            totals[item_id] = totals.get(item_id, 0) + quantity
    return totals


def test_ganged_example_is_single_run(config):
    items = make_items(1000, 1005, 980)
    runs = create_ganged_runs(items, config, max_overrun=250)

    assert len(runs) == 1
    run = runs[0]
    assert run.frames == 56
    assert [a.item_id for a in run.slot_assignments] == ["item-1", "item-2", "item-3", "item-1"]
    demands = run.quantity_by_item()
    assert max(demands.values()) - min(demands.values()) <= 250


def test_ganged_not_applicable_with_more_items_than_slots(config):
    assert create_ganged_runs(make_items(1, 2, 3, 4, 5), config) == []


def test_ganged_splits_outliers(config):
    runs = create_ganged_runs(make_items(3000, 500), config, max_overrun=250)
    assert len(runs) == 2
    assert _totals(runs) == {"item-1": 3000, "item-2": 500}


def test_individual_baseline(config):
    items = make_items(1000, 1005, 980)
    runs = create_individual_runs(items, config)

    assert [run.run_number for run in runs] == [1, 2, 3]
    for item, run in zip(items, runs):
        assert len(run.slot_assignments) == 4
        assert {a.item_id for a in run.slot_assignments} == {item.id}


def test_single_item_run_divides_evenly(config):
    run = create_single_item_run(LabelItem(id="x", quantity=1001), 4, config)
    assert [a.quantity_in_slot for a in run.slot_assignments] == [251, 251, 251, 251]
    assert run.frames == 14
    assert run.run_number == 4


def test_optimized_gangs_items_that_fit_overrun(config):
    items = make_items(1000, 1005, 980)
    runs = create_optimized_runs(items, config, max_overrun=250)

    # three items would duplicate one of them at half quantity and overrun it
    assert len(runs) == 2
    assert runs[0].item_ids == {"item-1", "item-2"}
    assert runs[1].item_ids == {"item-3"}
    assert _totals(runs) == {"item-1": 1000, "item-2": 1006, "item-3": 980}


def test_optimized_separates_incompatible_quantities(config):
    runs = create_optimized_runs(make_items(500, 3000), config, max_overrun=250)
    assert [run.item_ids for run in runs] == [{"item-2"}, {"item-1"}]
    assert [run.run_number for run in runs] == [1, 2]


def test_optimized_groups_full_slot_batches(config):
    items = make_items(1000, 990, 1010, 1005, 400, 410, 395, 405)
    runs = create_optimized_runs(items, config, max_overrun=250)
    assert [len(run.item_ids) for run in runs] == [4, 4]
    for run in runs:
        assert len(run.slot_assignments) == 4


def test_optimized_falls_back_to_single_item_runs():
    # 480 labels per slot per frame: any small quantity overruns by more than 250
    dieline = LabelDieline(columns_across=2, rows_around=1, label_width_mm=10, label_height_mm=2)
    config = get_slot_config(dieline)
    assert config.labels_per_slot_per_frame == 480

    runs = create_optimized_runs(make_items(10, 20), config, max_overrun=250)
    assert len(runs) == 2
    assert all(len(run.item_ids) == 1 for run in runs)
    assert _totals(runs) == {"item-1": 10, "item-2": 20}


def test_equal_quantity_levels(config):
    runs = create_equal_quantity_runs(make_items(500, 500, 300), config)

    assert len(runs) == 2
    first, second = runs
    assert [a.quantity_in_slot for a in first.slot_assignments] == [500, 500, 0, 0]
    assert [a.item_id for a in first.slot_assignments] == ["item-1", "item-2", None, None]
    assert [a.quantity_in_slot for a in second.slot_assignments] == [300, 0, 0, 0]
    assert second.item_ids == {"item-3"}


@pytest.mark.parametrize(
    "quantities",
    [(500, 500, 300), (700, 700, 700, 700, 700, 300), (1, 2, 3, 4, 5, 6, 7, 8, 9), (1200,)],
)
def test_equal_quantity_slots_share_one_quantity(config, quantities):
    items = make_items(*quantities)
    runs = create_equal_quantity_runs(items, config)

    for run in runs:
        assert len(run.slot_assignments) == 4
        filled = {a.quantity_in_slot for a in run.slot_assignments if not a.is_blank}
        assert len(filled) == 1
    assert _totals(runs) == {item.id: item.quantity for item in items}


def test_equal_quantity_batches_by_slot_count(config):
    runs = create_equal_quantity_runs(make_items(700, 700, 700, 700, 700, 300), config)
    assert [len(run.item_ids) for run in runs] == [4, 1, 1]
    assert [run.blank_slots for run in runs] == [0, 3, 3]


def test_roll_optimized_requires_roll_length(config):
    assert create_roll_optimized_runs(make_items(1000, 400), config, qty_per_roll=None) == []


def test_roll_optimized_skipped_without_absorption(config):
    # optimized runs never share items, so nothing can be folded together
    assert create_roll_optimized_runs(make_items(3000, 400), config, qty_per_roll=1000) == []


def test_ganged_balances_item_totals_not_slot_output(config):
    runs = create_ganged_runs(make_items(1000, 800, 800), config)
    assert len(runs) == 1
    annotated = annotate_runs_with_roll_info(runs, config)
    assert annotated[0].actual_labels_per_slot == 810
    assert annotated[0].overrun_warning == "Overrun above 250 labels: slot 0 +310, slot 3 +310"


def test_registry_tags():
    assert [strategy.tag for strategy in STRATEGIES] == [
        "ganged",
        "individual",
        "optimized",
        "equal-quantity",
        "roll-optimized",
    ]
    assert get_strategy("optimized").tag == "optimized"
    with pytest.raises(KeyError):
        get_strategy("unknown")


def test_optimized_strategy_skips_single_item(config):
    strategy = get_strategy("optimized")
    assert strategy.generate(make_items(100), config, StrategyParams()) == []
