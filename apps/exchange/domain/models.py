"""
Pure domain entities (POPOs).
No dependency on Django or the ORM.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP


AMOUNT_PRECISION = Decimal("0.0001")

RateMap = dict[str, Decimal]


def normalize_code(code: str) -> str:
    return code.strip().upper()


def round_amount(value: Decimal) -> Decimal:
    """Round to 4 decimal places, midpoints away from zero."""
    return value.quantize(AMOUNT_PRECISION, rounding=ROUND_HALF_UP)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ExchangeRate:

    base_currency: str
    target_currency: str
    rate: Decimal
    date: date
    last_updated: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        if self.rate <= 0:
            raise ValueError(f"rate must be positive, got {self.rate}")

    def convert(self, amount: Decimal) -> Decimal:
        return round_amount(amount * self.rate)

    def to_dict(self) -> dict:
        return {
            "base_currency": self.base_currency,
            "target_currency": self.target_currency,
            "rate": str(self.rate),
            "date": self.date.isoformat(),
            "last_updated": self.last_updated.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExchangeRate":
        return cls(
            base_currency=data["base_currency"],
            target_currency=data["target_currency"],
            rate=Decimal(data["rate"]),
            date=date.fromisoformat(data["date"]),
            last_updated=datetime.fromisoformat(data["last_updated"]),
        )
