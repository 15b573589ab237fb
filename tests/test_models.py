from __future__ import annotations

import pytest

from labelpack_poc.core.errors import InvalidGeometryError, InvalidItemError, LayoutError
from labelpack_poc.models.dieline import LabelDieline
from labelpack_poc.models.item import LabelItem
from labelpack_poc.models.layout import OptimizationWeights


def test_item_rejects_zero_quantity():
    with pytest.raises(InvalidItemError):
        LabelItem(id="a", quantity=0)


def test_item_rejects_negative_quantity():
    with pytest.raises(InvalidItemError):
        LabelItem(id="a", quantity=-5)


def test_item_errors_are_value_errors():
    with pytest.raises(ValueError):
        LabelItem(id="a", quantity=0)
    assert issubclass(InvalidItemError, LayoutError)


def test_item_name_defaults_to_id():
    item = LabelItem(id="sku-1", quantity=10)
    assert item.name == "sku-1"
    assert item.needs_rotation is False


def test_item_from_dict():
    item = LabelItem.from_dict({"id": 7, "quantity": 300, "needs_rotation": True, "name": "Lime"})
    assert item.id == "7"
    assert item.quantity == 300
    assert item.needs_rotation is True
    assert item.to_dict()["name"] == "Lime"


def test_dieline_null_bleed_is_zero():
    dieline = LabelDieline.from_dict(
        {
            "columns_across": 3,
            "rows_around": 2,
            "label_width_mm": 40,
            "label_height_mm": 30,
            "vertical_gap_mm": 3,
            "bleed_top_mm": None,
            "bleed_bottom_mm": None,
            "roll_width_mm": 250,
        }
    )
    assert dieline.bleed_top_mm == 0.0
    assert dieline.bleed_bottom_mm == 0.0
    assert dieline.template_height_mm == pytest.approx(63.0)


def test_dieline_template_height_includes_bleed():
    dieline = LabelDieline(
        columns_across=3,
        rows_around=3,
        label_width_mm=70,
        label_height_mm=100,
        vertical_gap_mm=3,
        bleed_top_mm=1.5,
        bleed_bottom_mm=1.5,
    )
    assert dieline.template_height_mm == pytest.approx(309.0)
    assert dieline.labels_per_template == 9


def test_dieline_rejects_negative_gap():
    with pytest.raises(InvalidGeometryError):
        LabelDieline(columns_across=2, rows_around=1, label_width_mm=10, label_height_mm=10, vertical_gap_mm=-1)


def test_weights_default_to_equal_thirds():
    weights = OptimizationWeights()
    assert weights.material_efficiency == pytest.approx(1 / 3)
    assert weights.print_efficiency == pytest.approx(1 / 3)
    assert weights.labor_efficiency == pytest.approx(1 / 3)


def test_weights_from_partial_dict():
    weights = OptimizationWeights.from_dict({"material_efficiency": 0.5})
    assert weights.material_efficiency == 0.5
    assert weights.print_efficiency == pytest.approx(1 / 3)
