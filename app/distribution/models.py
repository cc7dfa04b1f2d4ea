"""In-memory types for distribution dispatch."""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum


@dataclass(frozen=True)
class Payment:
    """One payment made by a spender on a friend's behalf."""

    description: str
    amount: Decimal
    paid: bool = False

    def __post_init__(self) -> None:
        try:
            amount = self.amount if isinstance(self.amount, Decimal) else Decimal(str(self.amount))
        except InvalidOperation as exc:
            raise ValueError(f"Invalid payment amount: {self.amount!r}") from exc
        if not amount.is_finite() or amount < 0:
            raise ValueError(f"Payment amount must be a non-negative number, got {self.amount!r}")
        object.__setattr__(self, "amount", amount)


SpenderLedger = Mapping[str, Sequence[Payment]]
Distribution = Mapping[str, SpenderLedger]


@dataclass(frozen=True)
class EmailTask:
    friend_name: str
    email_address: str | None
    ledger: SpenderLedger | None


class TaskState(str, Enum):
    PENDING = "PENDING"
    FORMATTING = "FORMATTING"
    RENDERING = "RENDERING"
    SENDING = "SENDING"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"


class DispatchState(str, Enum):
    IDLE = "IDLE"
    AWAITING_ALL = "AWAITING_ALL"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


@dataclass
class TaskOutcome:
    """Final state of a single friend's email task."""

    friend_name: str
    state: TaskState
    error: str | None = None


@dataclass
class DispatchResult:
    """Aggregate outcome of a dispatch.

    ``outcomes`` is kept for logging; callers only look at ``succeeded``.
    """

    state: DispatchState = DispatchState.IDLE
    outcomes: list[TaskOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state is DispatchState.SUCCEEDED

    @property
    def failed_tasks(self) -> list[TaskOutcome]:
        return [o for o in self.outcomes if o.state is TaskState.FAILED]


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: bytes
    mime_type: str = "application/pdf"
