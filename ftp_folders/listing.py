"""
Directory listing parsers.

MLSD replies are structured facts; LIST replies are free-form text whose
layout depends on the server (Unix "ls -l" style or Windows/IIS style).
"""

import logging
from datetime import datetime

from .session import RemoteEntry

logger = logging.getLogger(__name__)

MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

DIR_TYPES = ("dir", "cdir", "pdir")
SKIPPED_NAMES = (".", "..")


def parse_mlsd_time(text: str) -> datetime:
    """Parse MLSD modify time (YYYYMMDDHHmmSS, optionally with .sss)."""
    if not text:
        return datetime.now()
    try:
        return datetime.strptime(text.split(".")[0], "%Y%m%d%H%M%S")
    except ValueError:
        logger.warning("Failed to parse MLSD time: %s", text)
        return datetime.now()


def parse_mlsd_facts(name: str, facts: dict[str, str]) -> RemoteEntry | None:
    """Build an entry from one MLSD record. Returns None for . and .. records."""
    kind = facts.get("type", "").lower()
    if name in SKIPPED_NAMES or kind in ("cdir", "pdir"):
        return None
    is_dir = kind in DIR_TYPES
    size = 0 if is_dir else int(facts.get("size", 0) or 0)
    return RemoteEntry(
        name=name, is_dir=is_dir, size=size, mtime=parse_mlsd_time(facts.get("modify", ""))
    )


def _parse_unix_time(month: str, day: str, time_or_year: str) -> datetime:
    """'Dec 10 12:34' (current year) or 'Dec 10  2020' (midnight)."""
    try:
        if ":" in time_or_year:
            hour, minute = map(int, time_or_year.split(":"))
            year = datetime.now().year
        else:
            year, hour, minute = int(time_or_year), 0, 0
        return datetime(year, MONTHS.get(month.lower(), 1), int(day), hour, minute)
    except ValueError:
        return datetime.now()


def _parse_windows_time(date_str: str, time_str: str) -> datetime:
    """'12-10-20' and '12:34PM'."""
    try:
        month, day, year = map(int, date_str.split("-"))
        if year < 100:
            year += 2000 if year < 70 else 1900

        time_str = time_str.upper()
        is_pm = time_str.endswith("PM")
        hour, minute = map(int, time_str.rstrip("APM").split(":"))
        if is_pm and hour != 12:
            hour += 12
        elif not is_pm and hour == 12 and time_str.endswith("AM"):
            hour = 0
        return datetime(year, month, day, hour, minute)
    except ValueError:
        return datetime.now()


def _parse_unix_line(line: str) -> RemoteEntry | None:
    # drwxr-xr-x  2 owner group  4096 Dec 10 12:34 name with spaces
    parts = line.split(None, 8)
    if len(parts) < 9:
        return None
    try:
        is_dir = parts[0][0] == "d"
        size = 0 if is_dir else int(parts[4])
    except ValueError:
        logger.warning("Failed to parse Unix LIST line: %s", line)
        return None

    name = parts[8]
    if parts[0][0] == "l" and " -> " in name:
        # Symlink target is not part of the name
        name = name.split(" -> ", 1)[0]
    return RemoteEntry(
        name=name, is_dir=is_dir, size=size, mtime=_parse_unix_time(*parts[5:8])
    )


def _parse_windows_line(line: str) -> RemoteEntry | None:
    # 12-10-20  12:34PM       <DIR>          dirname
    # 12-10-20  12:34PM                1234 filename
    parts = line.split(None, 3)
    if len(parts) < 4:
        return None
    is_dir = parts[2].upper() == "<DIR>"
    try:
        size = 0 if is_dir else int(parts[2])
    except ValueError:
        logger.warning("Failed to parse Windows LIST line: %s", line)
        return None
    return RemoteEntry(
        name=parts[3], is_dir=is_dir, size=size, mtime=_parse_windows_time(parts[0], parts[1])
    )


def parse_list_line(line: str) -> RemoteEntry | None:
    """
    Parse one line of LIST output.

    Returns:
        The entry, or None for blank lines, totals, . and .., and lines in
        an unknown format.
    """
    line = line.strip()
    if not line or line.lower().startswith("total"):
        return None

    first = line.split(None, 1)[0]
    if len(first) >= 10 and first[0] in "dl-":
        entry = _parse_unix_line(line)
    elif "-" in first and len(first) <= 10 and first[0].isdigit():
        entry = _parse_windows_line(line)
    else:
        logger.warning("Unknown LIST format: %s", line)
        return None

    if entry is None or entry.name in SKIPPED_NAMES:
        return None
    return entry
