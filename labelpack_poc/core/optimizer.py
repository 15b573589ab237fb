"""
Entry point generating ranked layout options for a label order.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from labelpack_poc.core.errors import InvalidItemError, InvalidRequestError
from labelpack_poc.core.geometry import get_slot_config
from labelpack_poc.core.rolls import annotate_runs_with_roll_info
from labelpack_poc.core.scoring import (
    DEFAULT_INK_CONFIG,
    INK_SPEEDS_M_PER_MIN,
    create_layout_option,
    describe_runs,
    theoretical_min_meters,
)
from labelpack_poc.core.slots import DEFAULT_MAX_OVERRUN
from labelpack_poc.core.strategies import STRATEGIES, LayoutStrategy, StrategyParams
from labelpack_poc.models.dieline import LabelDieline
from labelpack_poc.models.item import LabelItem
from labelpack_poc.models.layout import LayoutOption, OptimizationWeights, ProposedRun, SlotConfig


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutRequest:
    """Everything one optimisation call depends on."""

    items: Tuple[LabelItem, ...]
    dieline: LabelDieline
    weights: OptimizationWeights = field(default_factory=OptimizationWeights)
    ink_config: str = field(default=DEFAULT_INK_CONFIG)
    qty_per_roll: Optional[int] = field(default=None)
    max_overrun: int = field(default=DEFAULT_MAX_OVERRUN)
    blank_slot_penalty: float = field(default=0.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))
        if self.ink_config not in INK_SPEEDS_M_PER_MIN:
            raise InvalidRequestError(
                f"ink_config must be one of {sorted(INK_SPEEDS_M_PER_MIN)}, got {self.ink_config!r}"
            )
        if self.max_overrun < 0:
            raise InvalidRequestError(f"max_overrun cannot be negative, got {self.max_overrun!r}")
        if self.qty_per_roll is not None and self.qty_per_roll <= 0:
            raise InvalidRequestError(f"qty_per_roll must be positive, got {self.qty_per_roll!r}")
        if not 0 <= self.blank_slot_penalty <= 1:
            raise InvalidRequestError(f"blank_slot_penalty must be within [0, 1], got {self.blank_slot_penalty!r}")


def _validate_items(items: Sequence[LabelItem]) -> None:
    seen = set()
    for item in items:
        if item.quantity <= 0:
            raise InvalidItemError(f"quantity for {item.id!r} must be positive, got {item.quantity!r}")
        if item.id in seen:
            raise InvalidItemError(f"duplicate item id {item.id!r}")
        seen.add(item.id)


def _run_strategy(strategy: LayoutStrategy, request: LayoutRequest, config: SlotConfig) -> List[ProposedRun]:
    params = StrategyParams(max_overrun=request.max_overrun, qty_per_roll=request.qty_per_roll)
    runs = strategy.generate(request.items, config, params)
    logger.debug("Strategy %s produced %d run(s)", strategy.tag, len(runs))
    return runs


def generate_layout_options(request: LayoutRequest, parallel: bool = False) -> List[LayoutOption]:
    """
    Run every strategy over the same items and return the scored options,
    best first.

    The call is a pure function of ``request``; ``parallel`` evaluates the
    strategies on a thread pool and yields the same result.
    """
    if not request.items:
        return []

    _validate_items(request.items)
    config = get_slot_config(request.dieline)

    if parallel:
        with ThreadPoolExecutor(max_workers=len(STRATEGIES)) as executor:
            futures = [executor.submit(_run_strategy, strategy, request, config) for strategy in STRATEGIES]
            results = [future.result() for future in futures]
    else:
        results = [_run_strategy(strategy, request, config) for strategy in STRATEGIES]

    theoretical_min = theoretical_min_meters(request.items, config)
    total_labels = sum(item.quantity for item in request.items)
    options: List[LayoutOption] = []
    for strategy, runs in zip(STRATEGIES, results):
        if not runs:
            continue
        annotated = annotate_runs_with_roll_info(runs, config, request.qty_per_roll, request.max_overrun)
        options.append(
            create_layout_option(
                strategy.tag,
                annotated,
                config,
                theoretical_min,
                describe_runs(strategy.description, annotated, total_labels),
                request.weights,
                ink_config=request.ink_config,
                blank_slot_penalty=request.blank_slot_penalty,
            )
        )

    if not options:
        logger.error(
            "No layout produced for %d item(s) on %s; slot config %s",
            len(request.items),
            request.dieline.name,
            config,
        )
        return []

    return sorted(options, key=lambda option: option.overall_score, reverse=True)
