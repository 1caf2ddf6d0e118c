"""
Duration helpers shared by the server and the CLI.

Durations are rendered and parsed in the compact ``1h2m3s`` notation the
device firmware and operators already use.
"""

import re

_UNITS: dict[str, float] = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_PART_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")


def format_elapsed(seconds: float) -> str:
    """
    Render *seconds* rounded half up to a whole second, e.g. ``0s``, ``45s``,
    ``2m0s``, ``1h0m5s``.
    """
    total = int(max(seconds, 0.0) + 0.5)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


def parse_duration(text: str) -> float:
    """
    Parse ``30s``, ``1m30s``, ``500ms``, ``2h`` or a bare number of seconds.

    Raises ``ValueError`` for anything else, including non-positive values.
    """
    value = text.strip()
    if not value:
        raise ValueError("empty duration")

    try:
        seconds = float(value)
    except ValueError:
        pos = 0
        seconds = 0.0
        for match in _PART_RE.finditer(value):
            if match.start() != pos:
                raise ValueError(f"invalid duration: {text!r}")
            seconds += float(match.group(1)) * _UNITS[match.group(2)]
            pos = match.end()
        if pos != len(value):
            raise ValueError(f"invalid duration: {text!r}")

    if seconds <= 0:
        raise ValueError(f"duration must be positive: {text!r}")
    return seconds
