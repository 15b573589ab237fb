"""
PDF report generator using ReportLab.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from labelpack_poc.models.dieline import LabelDieline
from labelpack_poc.models.layout import LayoutOption, ProposedRun, SlotConfig


def _build_table(data: Sequence[Sequence[str]], column_widths: Sequence[float]) -> Table:
    table = Table(data, colWidths=column_widths, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#F1F1F1")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.HexColor("#333333")),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#DDDDDD")),
            ]
        )
    )
    return table


def _input_table(dieline: LabelDieline, config: SlotConfig, qty_per_roll: Optional[int]) -> Table:
    headers = ["Parameter", "Value"]
    rows = [
        ("Dieline", dieline.name),
        ("Label Size (mm)", f"{dieline.label_width_mm} x {dieline.label_height_mm}"),
        ("Slots Across", config.total_slots),
        ("Rows Around", dieline.rows_around),
        ("Template Height (mm)", f"{config.template_height_mm:.1f}"),
        ("Templates per Frame", config.templates_per_frame),
        ("Labels per Slot per Frame", config.labels_per_slot_per_frame),
        ("Labels per Frame", config.labels_per_frame),
        ("Frames per Meter", f"{config.frames_per_meter:.3f}"),
        ("Roll Width (mm)", dieline.roll_width_mm),
        ("Labels per Roll", f"{qty_per_roll:,}" if qty_per_roll else "Not set"),
    ]
    data = [headers] + [[left, str(right)] for left, right in rows]
    return _build_table(data, column_widths=[70 * mm, 110 * mm])


def _options_table(options: Sequence[LayoutOption]) -> Table:
    headers = ["Rank", "Strategy", "Runs", "Meters", "Frames", "Waste (m)", "Material", "Print", "Labor", "Overall", "Minutes"]
    data = [headers]
    for rank, option in enumerate(options, start=1):
        data.append(
            [
                str(rank),
                option.id,
                str(option.run_count),
                f"{option.total_meters:.2f}",
                str(option.total_frames),
                f"{option.total_waste_meters:.2f}",
                f"{option.material_efficiency_score:.0%}",
                f"{option.print_efficiency_score:.0%}",
                f"{option.labor_efficiency_score:.0%}",
                f"{option.overall_score:.0%}",
                f"{option.production_minutes:.0f}",
            ]
        )
    widths = [12, 32, 14, 20, 18, 22, 22, 18, 18, 20, 20]
    return _build_table(data, column_widths=[width * mm for width in widths])


def _run_table(run: ProposedRun) -> Table:
    headers = ["Slot", "Item", "Quantity", "Actual Output", "Rotation"]
    data = [headers]
    for assignment in run.slot_assignments:
        data.append(
            [
                str(assignment.slot),
                assignment.item_id or "(blank)",
                f"{assignment.quantity_in_slot:,}",
                f"{run.actual_labels_per_slot:,}" if run.actual_labels_per_slot is not None else "",
                "Yes" if assignment.needs_rotation else "",
            ]
        )
    return _build_table(data, column_widths=[18 * mm, 60 * mm, 35 * mm, 35 * mm, 25 * mm])


def _run_notes(run: ProposedRun) -> str:
    notes = [f"{run.frames} frames, {run.meters:.2f} m"]
    if run.needs_rewinding:
        notes.append("needs manual rewinding")
    if run.consolidation_suggestion:
        notes.append(run.consolidation_suggestion)
    if run.overrun_warning:
        notes.append(run.overrun_warning)
    notes.extend(f"{split.strategy.replace('_', ' ')}: {split.label}" for split in run.roll_splits)
    return "; ".join(notes)


def generate_pdf_report(
    output_path: str | Path,
    dieline: LabelDieline,
    slot_config: SlotConfig,
    options: Sequence[LayoutOption],
    qty_per_roll: Optional[int] = None,
) -> Path:
    """
    Generate a layout optimisation PDF report and return the output path.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    doc = SimpleDocTemplate(
        str(output_path),
        pagesize=landscape(A4),
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title="Label Layout Optimisation Report",
    )

    styles = getSampleStyleSheet()
    title_style = styles["Title"]
    subtitle_style = ParagraphStyle(
        "Subtitle",
        parent=styles["Heading2"],
        textColor=colors.HexColor("#2D5B88"),
    )
    body_style = styles["BodyText"]

    story: list = [
        Paragraph("Label Layout Optimisation Report", title_style),
        Spacer(1, 8 * mm),
        Paragraph("Input Summary", subtitle_style),
        Spacer(1, 4 * mm),
        _input_table(dieline, slot_config, qty_per_roll),
    ]

    if not options:
        story.extend([Spacer(1, 6 * mm), Paragraph("No layout options were generated.", body_style)])
        doc.build(story)
        return output_path

    best = options[0]
    story.extend(
        [
            Spacer(1, 6 * mm),
            Paragraph("Ranked Options", subtitle_style),
            Spacer(1, 4 * mm),
            _options_table(options),
            Spacer(1, 6 * mm),
            Paragraph(f"Recommended Layout: {best.id}", subtitle_style),
            Paragraph(best.reasoning, body_style),
        ]
    )

    for run in best.runs:
        story.extend(
            [
                Spacer(1, 4 * mm),
                Paragraph(f"Run {run.run_number}", styles["Heading3"]),
                Paragraph(_run_notes(run), body_style),
                Spacer(1, 2 * mm),
                _run_table(run),
            ]
        )

    doc.build(story)
    return output_path
