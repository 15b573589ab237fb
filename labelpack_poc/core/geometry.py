"""
Press geometry helpers: slot configuration, frame and meter arithmetic.
"""

from __future__ import annotations

import math

from labelpack_poc.core.errors import InvalidGeometryError
from labelpack_poc.models.dieline import LabelDieline
from labelpack_poc.models.layout import SlotConfig


MAX_FRAME_LENGTH_MM = 960  # longest printable frame on the press


def get_slot_config(dieline: LabelDieline, max_frame_length_mm: float = MAX_FRAME_LENGTH_MM) -> SlotConfig:
    """
    Derive the slot configuration for a dieline.

    As many template repeats as fit are stacked into one physical frame, so a
    short label gives more labels per slot per frame than ``rows_around``.
    """
    if dieline.columns_across <= 0:
        raise InvalidGeometryError(f"columns_across must be positive, got {dieline.columns_across!r}")
    if dieline.rows_around <= 0:
        raise InvalidGeometryError(f"rows_around must be positive, got {dieline.rows_around!r}")

    template_height_mm = dieline.template_height_mm
    if template_height_mm <= 0:
        raise InvalidGeometryError(f"template height must be positive, got {template_height_mm!r}")

    templates_per_frame = max(1, math.floor(max_frame_length_mm / template_height_mm))
    labels_per_slot_per_frame = dieline.rows_around * templates_per_frame
    frame_height_mm = template_height_mm * templates_per_frame

    return SlotConfig(
        total_slots=dieline.columns_across,
        labels_per_slot_per_frame=labels_per_slot_per_frame,
        labels_per_frame=dieline.columns_across * labels_per_slot_per_frame,
        frames_per_meter=1000.0 / frame_height_mm,
        templates_per_frame=templates_per_frame,
        template_height_mm=template_height_mm,
        frame_height_mm=frame_height_mm,
    )


def calculate_frames_for_slot(quantity: int, config: SlotConfig) -> int:
    """Return the frames needed to print ``quantity`` labels in one slot."""
    if quantity <= 0:
        return 0
    return math.ceil(quantity / config.labels_per_slot_per_frame)


def calculate_meters(frames: int, config: SlotConfig) -> float:
    return round(frames / config.frames_per_meter, 2)


def actual_labels_per_slot(frames: int, config: SlotConfig) -> int:
    """Return the physical, frame-quantised output of every slot in a run."""
    return frames * config.labels_per_slot_per_frame
