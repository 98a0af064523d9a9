"""Record types returned by the data client."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class ExpenseRecord:
    """Simple data holder describing an expense entry."""

    id: str | None
    name: str
    amount: Decimal
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def key(self) -> str:
        """Identifier used to key rendered cards; falls back to the name."""

        return self.id or self.name

    @property
    def amount_label(self) -> str:
        return f"${self.amount}"

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ExpenseRecord":
        try:
            amount = Decimal(str(payload["amount"]))
        except (KeyError, InvalidOperation) as exc:
            raise ValueError(f"Invalid expense payload: {payload!r}") from exc
        return cls(
            id=payload.get("id"),
            name=str(payload.get("name", "")),
            amount=amount,
            created_at=payload.get("created_at"),
            updated_at=payload.get("updated_at"),
        )


# Record type and collection path for every model the client knows how to talk to.
MODEL_REGISTRY: dict[str, tuple[type[ExpenseRecord], str]] = {
    "Expense": (ExpenseRecord, "expenses"),
}


__all__ = ["ExpenseRecord", "MODEL_REGISTRY"]
