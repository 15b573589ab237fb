"""
Command line script to execute the label layout optimisation end-to-end.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add parent directory to path to allow imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from labelpack_poc.core.errors import LayoutError
from labelpack_poc.core.geometry import get_slot_config
from labelpack_poc.core.optimizer import LayoutRequest, generate_layout_options
from labelpack_poc.core.scoring import format_layout_summary, validate_layout
from labelpack_poc.models.dieline import LabelDieline
from labelpack_poc.models.item import LabelItem
from labelpack_poc.models.layout import OptimizationWeights
from labelpack_poc.report.pdf_generator import generate_pdf_report


BASE_DIR = Path(__file__).resolve().parent
CONFIG_DIR = BASE_DIR / "config"

logger = logging.getLogger("labelpack_poc")


def load_config(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as file:
        return json.load(file)


def build_request(order: dict, dielines: dict, args: argparse.Namespace) -> LayoutRequest:
    dieline_key = args.dieline or order.get("dieline")
    if dieline_key not in dielines:
        raise LayoutError(f"unknown dieline template {dieline_key!r}; choose from {sorted(dielines)}")

    qty_per_roll = args.qty_per_roll if args.qty_per_roll is not None else order.get("qty_per_roll")
    max_overrun = args.max_overrun if args.max_overrun is not None else order.get("max_overrun", 250)
    return LayoutRequest(
        items=tuple(LabelItem.from_dict(line) for line in order.get("items", [])),
        dieline=LabelDieline.from_dict(dielines[dieline_key]),
        weights=OptimizationWeights.from_dict(order.get("weights", {})),
        ink_config=args.ink or order.get("ink_config", "CMYK"),
        qty_per_roll=qty_per_roll,
        max_overrun=int(max_overrun),
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rank label layouts for a press roll.")
    parser.add_argument("--order", type=Path, default=CONFIG_DIR / "sample_order.json", help="order JSON file")
    parser.add_argument("--dieline", help="dieline template key from config/dielines.json")
    parser.add_argument("--qty-per-roll", type=int, default=None, help="target labels per finished roll")
    parser.add_argument("--max-overrun", type=int, default=None, help="labels a slot may over-print")
    parser.add_argument("--ink", choices=["CMY", "CMYK", "CMYKW", "CMYKO"], help="ink configuration")
    parser.add_argument("--output", type=Path, default=BASE_DIR / "artifacts", help="output directory")
    parser.add_argument("--parallel", action="store_true", help="evaluate strategies on a thread pool")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        request = build_request(load_config(args.order), load_config(CONFIG_DIR / "dielines.json"), args)
        slot_config = get_slot_config(request.dieline)
        options = generate_layout_options(request, parallel=args.parallel)
    except LayoutError as exc:
        logger.error("Optimisation failed: %s", exc)
        return 1

    output_dir = args.output
    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / "layout_options.json"
    with open(json_path, "w", encoding="utf-8") as file:
        json.dump([option.to_dict() for option in options], file, indent=2)
    pdf_path = generate_pdf_report(
        output_dir / "layout_report.pdf",
        dieline=request.dieline,
        slot_config=slot_config,
        options=options,
        qty_per_roll=request.qty_per_roll,
    )

    print("=== Label Layout Optimisation Summary ===")
    print(f"Dieline: {request.dieline.name} ({slot_config.total_slots} slots, "
          f"{slot_config.labels_per_slot_per_frame} labels/slot/frame)")
    for rank, option in enumerate(options, start=1):
        print(f"{rank}. {option.id}: {format_layout_summary(option)}, ~{option.production_minutes:.0f} min")
        for error in validate_layout(option, request.items).errors:
            print(f"   ! {error}")
    print(f"Artifacts saved to: {json_path.parent} ({json_path.name}, {pdf_path.name})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
