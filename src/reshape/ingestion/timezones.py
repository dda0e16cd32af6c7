"""Approximate timezone lookup from GPS coordinates.

The resolver maps longitude to a whole-hour UTC offset (``round(longitude / 15)``)
and picks one representative IANA zone per offset. It ignores political
boundaries, half-hour zones and latitude entirely, so results near zone borders or
in countries such as India, China or Spain can be off by an hour or more.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .models import GpsCoordinates

LOGGER = logging.getLogger(__name__)

REPRESENTATIVE_ZONES: dict[int, str] = {
    -12: "Etc/GMT+12",
    -11: "Pacific/Pago_Pago",
    -10: "Pacific/Honolulu",
    -9: "America/Anchorage",
    -8: "America/Los_Angeles",
    -7: "America/Denver",
    -6: "America/Chicago",
    -5: "America/New_York",
    -4: "America/Halifax",
    -3: "America/Sao_Paulo",
    -2: "Atlantic/South_Georgia",
    -1: "Atlantic/Azores",
    0: "Europe/London",
    1: "Europe/Berlin",
    2: "Europe/Athens",
    3: "Europe/Moscow",
    4: "Asia/Dubai",
    5: "Asia/Karachi",
    6: "Asia/Dhaka",
    7: "Asia/Bangkok",
    8: "Asia/Shanghai",
    9: "Asia/Tokyo",
    10: "Australia/Sydney",
    11: "Pacific/Noumea",
    12: "Pacific/Auckland",
}


class TimezoneResolver:
    """Resolve timezones for coordinates and normalize capture timestamps to UTC."""

    def resolve(self, latitude: float, longitude: float) -> Optional[str]:
        """Return the representative zone id for the coordinates, if any.

        Args:
            latitude: Latitude in decimal degrees.
            longitude: Longitude in decimal degrees.

        Returns:
            Optional[str]: IANA timezone identifier, or ``None`` for invalid input.
        """
        if not all(math.isfinite(value) for value in (latitude, longitude)):
            return None
        if abs(latitude) > 90 or abs(longitude) > 180:
            return None
        offset = round(longitude / 15.0)
        offset = max(-12, min(12, offset))
        return REPRESENTATIVE_ZONES[offset]

    def to_utc(self, local: datetime, gps: Optional[GpsCoordinates] = None) -> datetime:
        """Convert a camera-local capture timestamp to an aware UTC datetime.

        Args:
            local: Naive timestamp as recorded by the camera.
            gps: Coordinates used to guess the zone the photo was taken in.

        Returns:
            datetime: UTC timestamp. Without coordinates, or when conversion fails,
                the local value is treated as if it were already UTC.
        """
        if local.tzinfo is not None:
            return local.astimezone(timezone.utc)

        if gps is not None:
            zone_id = self.resolve(gps.latitude, gps.longitude)
            if zone_id is not None:
                try:
                    return local.replace(tzinfo=ZoneInfo(zone_id)).astimezone(timezone.utc)
                except (ZoneInfoNotFoundError, OSError, ValueError, OverflowError) as exc:
                    LOGGER.debug("Could not convert %s using %s: %s", local, zone_id, exc)

        return local.replace(tzinfo=timezone.utc)


__all__ = ["REPRESENTATIVE_ZONES", "TimezoneResolver"]
