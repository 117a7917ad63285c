"""Money helpers and economy knobs shared across the engine.


- to_money / format_money keep every amount as a 2-decimal Decimal (never float).
- The economy accessors read Django settings at call time so overrides apply.
"""

from django.conf import settings
from decimal import Decimal, InvalidOperation, ROUND_DOWN

CENT = Decimal("0.01")


def to_money(amount: str | int | Decimal) -> Decimal:
    """
    Convert a human amount (e.g. "150", 75, Decimal("0.5")) to a 2-decimal Decimal.

    Floats are refused: they are how rounding drift gets in.
    """
    if isinstance(amount, float):
        raise TypeError("money amounts must not be floats")
    try:
        value = Decimal(str(amount))
        if not value.is_finite():
            raise InvalidOperation
        return value.quantize(CENT, rounding=ROUND_DOWN)
    except InvalidOperation:
        raise ValueError(f"not a money amount: {amount!r}")


def format_money(amount: Decimal) -> str:
    """
    Fixed-point text for JSON payloads.
    """
    return f"{to_money(amount):.2f}"


def publish_fee() -> Decimal:
    return to_money(settings.PUBLISH_FEE)


def publish_refund() -> Decimal:
    return to_money(settings.PUBLISH_REFUND)


def promotion_fee() -> Decimal:
    return to_money(getattr(settings, "PROMOTION_FEE", "0"))


def referral_bonus() -> Decimal:
    return to_money(settings.REFERRAL_BONUS)


def reader_reward() -> Decimal:
    return to_money(settings.READER_REWARD_AMOUNT)


def writer_reward_per_read() -> Decimal:
    return to_money(settings.WRITER_REWARD_PER_READ)


def min_read_seconds() -> int:
    return int(getattr(settings, "MIN_READ_SECONDS", 30))


def heartbeat_cap_seconds() -> int:
    return int(getattr(settings, "READING_HEARTBEAT_MAX_SECONDS", 5))


def heartbeat_slack_seconds() -> float:
    return float(getattr(settings, "READING_HEARTBEAT_SLACK_SECONDS", 1))


def heartbeat_wall_clock_check() -> bool:
    return bool(getattr(settings, "READING_HEARTBEAT_WALL_CLOCK", True))
