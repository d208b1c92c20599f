"""File-name <-> timestamp codec for stored barks.

Names look like ``bark_20240101_1_05_09_pm.wav``: date, 12-hour clock hour
(unpadded), minute, second and an am/pm marker. Timestamps are truncated to
whole seconds; the wall-clock fields are interpreted in ``tz`` (system local
zone when unset).
"""

from __future__ import annotations

import re
from datetime import datetime, tzinfo
from typing import Optional

PREFIX = "bark_"
SUFFIX = ".wav"
DELIMITER = "_"

_FIELDS = re.compile(r"^(\d{8})_(\d{1,2})_(\d{2})_(\d{2})_([A-Za-z]{2})$")


class CodecError(ValueError):
    pass


class InvalidFormat(CodecError):
    """Name does not follow the ``bark_<fields>.wav`` grammar."""


class InvalidTimestamp(CodecError):
    """Fields parse but do not describe a real date/time."""


class FilenameTimestampCodec:
    def __init__(self, tz: Optional[tzinfo] = None) -> None:
        self.tz = tz

    def encode(self, timestamp: datetime) -> str:
        local = self._to_zone(timestamp)
        hour = local.hour % 12 or 12
        marker = "am" if local.hour < 12 else "pm"
        payload = DELIMITER.join(
            [
                local.strftime("%Y%m%d"),
                str(hour),
                f"{local.minute:02d}",
                f"{local.second:02d}",
                marker,
            ]
        )
        return f"{PREFIX}{payload}{SUFFIX}"

    def decode(self, name: str) -> datetime:
        if not self.matches(name):
            raise InvalidFormat(f"{name!r} is not a bark file name")
        payload = name[len(PREFIX) : -len(SUFFIX)]
        match = _FIELDS.match(payload)
        if not match:
            raise InvalidFormat(f"{name!r} has malformed timestamp fields")
        date_part, hour_s, minute_s, second_s, marker = match.groups()
        hour12 = int(hour_s)
        if not 1 <= hour12 <= 12:
            raise InvalidTimestamp(f"hour {hour12} outside 1-12 in {name!r}")
        marker = marker.lower()
        if marker not in ("am", "pm"):
            raise InvalidTimestamp(f"unknown am/pm marker {marker!r} in {name!r}")
        hour24 = hour12 % 12 + (12 if marker == "pm" else 0)
        try:
            naive = datetime(
                int(date_part[:4]),
                int(date_part[4:6]),
                int(date_part[6:8]),
                hour24,
                int(minute_s),
                int(second_s),
            )
        except ValueError as exc:
            raise InvalidTimestamp(f"{name!r}: {exc}") from exc
        if self.tz is None:
            return naive.astimezone()
        return naive.replace(tzinfo=self.tz)

    def matches(self, name: str) -> bool:
        """Cheap prefix/suffix check used to filter directory listings."""
        return name.startswith(PREFIX) and name.endswith(SUFFIX) and len(name) > len(PREFIX) + len(SUFFIX)

    def truncate(self, timestamp: datetime) -> datetime:
        return self._to_zone(timestamp).replace(microsecond=0)

    def _to_zone(self, timestamp: datetime) -> datetime:
        if self.tz is None:
            return timestamp.astimezone()
        if timestamp.tzinfo is None:
            return timestamp.replace(tzinfo=self.tz)
        return timestamp.astimezone(self.tz)


__all__ = [
    "CodecError",
    "FilenameTimestampCodec",
    "InvalidFormat",
    "InvalidTimestamp",
    "PREFIX",
    "SUFFIX",
]
