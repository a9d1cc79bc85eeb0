"""Shared helpers — names, file names, hashing, timestamps."""

from __future__ import annotations

import hashlib
import re
from datetime import datetime, timezone
from pathlib import Path

REPORT_SUFFIX = "籌款活動應收款"

_SEQUENCE_PREFIX_RE = re.compile(r"^\s*\d+\s*\.")
_INVALID_FILENAME_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f]+')


def display_name(raw: str) -> str:
    """Strip a ``"1."``-style sequence prefix for human-facing titles.

    ``"1.Jane Doe"`` becomes ``"Jane Doe"``; names without a numbered prefix
    come back trimmed but otherwise unchanged.
    """
    if _SEQUENCE_PREFIX_RE.match(raw):
        return raw.split(".", 1)[1].strip()
    return raw.strip()


def sanitize_filename(name: str) -> str:
    """Join the pieces of *name* left between illegal file-name characters with ``_``."""
    parts = [part for part in _INVALID_FILENAME_RE.split(name) if part]
    cleaned = "_".join(parts).strip()
    return cleaned or "member"


def report_filename(year: str, member: str) -> str:
    return f"{year.replace('/', '')}{REPORT_SUFFIX}_{sanitize_filename(member)}.xlsx"


def sha256_file(path: Path) -> str:
    """Return the hex SHA-256 digest of *path*."""
    h = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def utcnow_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()
