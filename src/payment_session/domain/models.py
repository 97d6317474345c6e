from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, StrEnum
from typing import Self

from ulid import ULID

from payment_session.domain.exceptions import CurrencyMismatchError


PAYMENT_ATTEMPTS_FIELD = "payment_attempts"


class NotificationPayloadKey(StrEnum):
    BUYER_NAME = "BUYER_NAME"
    PAYMENT_AMOUNT = "PAYMENT_AMOUNT"
    IS_MULTI_TRANSACTION = "IS_MULTI_TRANSACTION"


class NotificationTopic(StrEnum):
    EMPTY_PAYMENT_BUYER_RECEIPT = "empty_payment_buyer_receipt"
    SINGLE_PAYMENT_BUYER_RECEIPT = "single_payment_buyer_receipt"
    MULTI_PAYMENT_BUYER_RECEIPT = "multi_payment_buyer_receipt"


class TransactionCountClass(Enum):
    NONE = "NONE"
    SINGLE = "SINGLE"
    MULTIPLE = "MULTIPLE"

    @classmethod
    def from_count(cls, count: int) -> "TransactionCountClass":
        if count < 0:
            raise ValueError("Transaction count cannot be negative")
        if count == 0:
            return cls.NONE
        if count == 1:
            return cls.SINGLE
        return cls.MULTIPLE


@dataclass(frozen=True)
class Money:
    """Amount in minor units with an optional ISO 4217 currency code.

    ``str(money)`` is the canonical rendering used everywhere an amount is shown:
    major units (two decimals only when there is a fractional part), a space,
    then the currency code. An unspecified currency leaves the trailing space,
    so a zero amount renders as ``"0 "``.
    """

    amount_cents: int
    currency: str = ""

    def __post_init__(self) -> None:
        if self.amount_cents < 0:
            raise ValueError("Amount cannot be negative")
        if self.currency and len(self.currency) != 3:
            raise ValueError("Currency must be ISO 4217 code (3 characters)")

    def __str__(self) -> str:
        major, minor = divmod(self.amount_cents, 100)
        units = f"{major}.{minor:02d}" if minor else str(major)
        return f"{units} {self.currency}"

    def add(self, other: "Money") -> "Money":
        if self.currency != other.currency:
            raise CurrencyMismatchError(expected=self.currency, actual=other.currency)
        return Money(self.amount_cents + other.amount_cents, self.currency)


@dataclass
class FlowControlState:
    payment_attempts: int | None = None

    def __post_init__(self) -> None:
        if self.payment_attempts is not None and self.payment_attempts < 0:
            raise ValueError("Payment attempts cannot be negative")

    def to_mapping(self) -> dict[str, str]:
        if self.payment_attempts is None:
            return {}
        return {PAYMENT_ATTEMPTS_FIELD: str(self.payment_attempts)}

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> Self:
        raw = mapping.get(PAYMENT_ATTEMPTS_FIELD)
        return cls(payment_attempts=int(raw) if raw is not None else None)


@dataclass(frozen=True)
class BuyerInfo:
    name: str
    account_id: int


@dataclass(frozen=True)
class SecurityContext:
    token: str


@dataclass
class SessionContext:
    session_id: str
    flow_control: FlowControlState | None = None
    buyer: BuyerInfo | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(cls, buyer: BuyerInfo | None = None) -> "SessionContext":
        return cls(
            session_id=str(ULID()),
            flow_control=FlowControlState(),
            buyer=buyer,
        )


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: Money
    reference: str | None = None

    @classmethod
    def create(cls, amount: Money, reference: str | None = None) -> "Transaction":
        return cls(id=str(ULID()), amount=amount, reference=reference)


@dataclass(frozen=True)
class PaymentRecord:
    payment_id: str
    transactions: tuple[Transaction, ...]
    amount: Money
    completed_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    @classmethod
    def create(
        cls,
        transactions: Iterable[Transaction],
        amount: Money | None = None,
    ) -> "PaymentRecord":
        """Build a record, summing the transactions when no aggregate amount is given."""
        entries = tuple(transactions)
        if amount is None:
            amount = Money(0, entries[0].amount.currency) if entries else Money(0)
            for entry in entries:
                amount = amount.add(entry.amount)
        return cls(payment_id=str(ULID()), transactions=entries, amount=amount)
