from __future__ import annotations

import pytest

from labelpack_poc.core.geometry import get_slot_config
from labelpack_poc.models.dieline import LabelDieline
from labelpack_poc.models.item import LabelItem
from labelpack_poc.models.layout import SlotConfig


def make_items(*quantities, prefix="item"):
    return [LabelItem(id=f"{prefix}-{index}", quantity=quantity) for index, quantity in enumerate(quantities, start=1)]


@pytest.fixture
def dieline():
    # 4 slots, 2 rows of 50 mm labels with a 2 mm gap -> 102 mm template
    return LabelDieline(
        name="50x50 4up",
        columns_across=4,
        rows_around=2,
        label_width_mm=50,
        label_height_mm=50,
        vertical_gap_mm=2,
        roll_width_mm=250,
    )


@pytest.fixture
def config(dieline):
    return get_slot_config(dieline)


@pytest.fixture
def round_config():
    # 100 labels per slot per frame, one frame per meter
    return SlotConfig(
        total_slots=2,
        labels_per_slot_per_frame=100,
        labels_per_frame=200,
        frames_per_meter=1.0,
        templates_per_frame=1,
        template_height_mm=1000.0,
        frame_height_mm=1000.0,
    )
