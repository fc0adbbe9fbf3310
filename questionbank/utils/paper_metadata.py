"""
Past-paper metadata inferred from upload filenames such as
``physics_2019_s_p1.pdf``.

This is a plain substring scan: the first run of four digits is taken as
the year and the first ``_s``/``_w``/``_m`` marker found decides the session.
"""
import re

_YEAR_RE = re.compile(r"(\d{4})")

_SESSION_MARKERS = (
    ("_s", "summer"),
    ("_w", "winter"),
    ("_m", "march"),
)


def year_from_filename(filename: str) -> str | None:
    match = _YEAR_RE.search(filename)
    return match.group(1) if match else None


def session_from_filename(filename: str) -> str | None:
    for marker, session in _SESSION_MARKERS:
        if marker in filename:
            return session
    return None
