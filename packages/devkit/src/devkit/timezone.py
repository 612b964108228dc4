"""Wall-clock helpers pinned to Western Indonesia Time (WIB, UTC+7)."""

from __future__ import annotations

from datetime import datetime
import os
import time
from zoneinfo import ZoneInfo

WIB_ZONE_NAME = "Asia/Jakarta"
WIB_ZONE = ZoneInfo(WIB_ZONE_NAME)

_pinned_zone: str | None = None


def pin_process_timezone(zone_name: str = WIB_ZONE_NAME) -> bool:
    """Set ``TZ`` for the process so stdlib log timestamps use local time.

    Returns ``False`` when the zone was already pinned by an earlier call.
    """
    global _pinned_zone
    if _pinned_zone == zone_name:
        return False
    ZoneInfo(zone_name)
    os.environ["TZ"] = zone_name
    if hasattr(time, "tzset"):
        time.tzset()
    _pinned_zone = zone_name
    return True


def now_wib() -> datetime:
    return datetime.now(WIB_ZONE)


def now_wib_iso(timespec: str = "seconds") -> str:
    return now_wib().isoformat(timespec=timespec)
