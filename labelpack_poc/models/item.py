"""
Data model representing one label artwork on an order.

Items are produced by the order system; the optimiser only reads the
identifier, the required quantity and the rotation flag.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from labelpack_poc.core.errors import InvalidItemError


@dataclass(frozen=True)
class LabelItem:
    """Immutable label artwork with the number of labels required."""

    id: str
    quantity: int
    needs_rotation: bool = field(default=False)
    name: str = field(default="")

    def __post_init__(self) -> None:
        if self.id is None or str(self.id) == "":
            raise InvalidItemError("item id must be a non-empty identifier")
        object.__setattr__(self, "id", str(self.id))
        if isinstance(self.quantity, bool) or int(self.quantity) != self.quantity:
            raise InvalidItemError(f"quantity for {self.id!r} must be an integer, got {self.quantity!r}")
        if self.quantity <= 0:
            raise InvalidItemError(f"quantity for {self.id!r} must be positive, got {self.quantity!r}")
        object.__setattr__(self, "quantity", int(self.quantity))
        object.__setattr__(self, "needs_rotation", bool(self.needs_rotation))
        if not self.name:
            object.__setattr__(self, "name", self.id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "needs_rotation": self.needs_rotation,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "LabelItem":
        """Instantiate from a raw order line."""
        return cls(
            id=str(payload["id"]),
            quantity=payload["quantity"],
            needs_rotation=bool(payload.get("needs_rotation", False)),
            name=str(payload.get("name") or ""),
        )
