# backend/voll/date_utils.py
from datetime import datetime, date, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from .config import settings

WEEKDAYS_PT = [
    "segunda-feira", "terça-feira", "quarta-feira", "quinta-feira",
    "sexta-feira", "sábado", "domingo",
]
MONTHS_PT = [
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
]


def studio_tz() -> ZoneInfo:
    return ZoneInfo(settings.STUDIO_TIMEZONE)


def parse_iso_datetime(s: Optional[str]) -> Optional[datetime]:
    """Parse an ISO timestamp; naive values are taken as UTC."""
    if s is None or s == "":
        return None
    value = datetime.fromisoformat(s.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_local(dt: datetime) -> datetime:
    # SQLite hands timestamps back naive; everything is stored in UTC
    return to_utc(dt).astimezone(studio_tz())


def format_long_date_pt(dt: datetime) -> str:
    """'segunda-feira, 3 de março' in studio time."""
    local = to_local(dt)
    return f"{WEEKDAYS_PT[local.weekday()]}, {local.day} de {MONTHS_PT[local.month - 1]}"


def format_time_pt(dt: datetime) -> str:
    return to_local(dt).strftime("%H:%M")


def format_short_date_pt(dt: Optional[datetime]) -> str:
    if dt is None:
        return ""
    if isinstance(dt, datetime):
        dt = to_local(dt)
    return dt.strftime("%d/%m/%Y")


def format_report_date_pt(d: date) -> str:
    """'19 de outubro de 2026'"""
    return f"{d.day:02d} de {MONTHS_PT[d.month - 1]} de {d.year}"


def week_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """Monday 00:00 to Sunday 23:59:59.999999 of the week containing `now`, in studio time."""
    local = to_local(now)
    monday = local.date() - timedelta(days=local.weekday())
    start = datetime.combine(monday, time.min, tzinfo=local.tzinfo)
    end = datetime.combine(monday + timedelta(days=6), time.max, tzinfo=local.tzinfo)
    return start, end


def day_bounds(now: datetime) -> Tuple[datetime, datetime]:
    local = to_local(now)
    start = datetime.combine(local.date(), time.min, tzinfo=local.tzinfo)
    end = datetime.combine(local.date(), time.max, tzinfo=local.tzinfo)
    return start, end
