"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def time_label(moment: datetime | None = None) -> str:
    """Shop-facing timestamp label: '2024-05-01 03:07:09 PM'.

    Game listings filter by date with a plain prefix match on this label,
    so the date part must always lead.
    """
    moment = (moment or utc_now()).astimezone()
    return moment.strftime("%Y-%m-%d %I:%M:%S %p")
