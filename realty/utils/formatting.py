"""Display helpers for prices and timestamps."""

from datetime import datetime, timezone

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000


def format_price(amount: float, currency: str = "₹") -> str:
    """Abbreviate a price in Indian units: Cr, L, or K with one decimal.

    >>> format_price(5000000)
    '₹50.0 L'
    """
    if amount >= CRORE:
        return f"{currency}{amount / CRORE:.1f} Cr"
    if amount >= LAKH:
        return f"{currency}{amount / LAKH:.1f} L"
    if amount >= THOUSAND:
        return f"{currency}{amount / THOUSAND:.1f} K"
    if float(amount).is_integer():
        amount = int(amount)
    return f"{currency}{amount}"


def _parse(when: datetime | str) -> datetime:
    if isinstance(when, str):
        # fromisoformat only accepts a trailing Z from Python 3.11 on
        when = datetime.fromisoformat(when.replace("Z", "+00:00"))
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when


def _plural(count: int, unit: str) -> str:
    return f"1 {unit} ago" if count == 1 else f"{count} {unit}s ago"


def format_relative_time(
    when: datetime | str, now: datetime | None = None
) -> str:
    """Describe how long ago `when` was, in whole days and coarser units.

    Naive datetimes are taken to be UTC.
    """
    then = _parse(when)
    now = _parse(now) if now is not None else datetime.now(timezone.utc)
    days = (now - then).days

    if days <= 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    if days < 30:
        return _plural(days // 7, "week")
    if days < 365:
        return _plural(days // 30, "month")
    return _plural(days // 365, "year")
