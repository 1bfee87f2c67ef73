"""Convert raw films-API objects into canonical ``MovieRecord`` values.

Everything here is total: malformed input degrades to placeholders
instead of raising.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from .models import UNKNOWN, MovieRecord

_REFERENCE_FIELDS = ("characters", "planets", "starships", "vehicles", "species")


def unwrap_payload(raw: object) -> Mapping[str, Any]:
    """Return the film mapping inside a single-item response.

    Accepts a bare film object, ``{"result": {...}}`` and
    ``{"result": {"properties": {...}}}``. Anything else is empty.
    """
    if not isinstance(raw, Mapping):
        return {}
    inner = raw.get("result")
    if isinstance(inner, Mapping):
        props = inner.get("properties")
        if isinstance(props, Mapping):
            return props
        return inner
    return raw


def _text(value: object, fallback: str = "") -> str:
    if value is None:
        return fallback
    text = str(value).strip()
    return text or fallback


def _episode(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _references(value: object) -> tuple[str, ...]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        return ()
    return tuple(str(item) for item in value if item is not None)


def _crawl(value: object) -> str:
    if value is None:
        return ""
    return str(value).replace("\r\n", "\n").replace("\r", "\n")


def make_uid(raw_episode: object) -> str:
    if raw_episode is not None and raw_episode != "":
        return str(raw_episode)
    return uuid.uuid4().hex


def normalize(raw: object) -> MovieRecord:
    """Build a ``MovieRecord`` from one raw film object."""
    data = raw if isinstance(raw, Mapping) else {}
    raw_episode = data.get("episode_id")
    episode = _episode(raw_episode)
    return MovieRecord(
        uid=make_uid(raw_episode),
        title=_text(data.get("title"), UNKNOWN),
        episode_id=episode if episode is not None else 0,
        opening_crawl=_crawl(data.get("opening_crawl")),
        director=_text(data.get("director"), UNKNOWN),
        producer=_text(data.get("producer"), UNKNOWN),
        release_date=_text(data.get("release_date")),
        created=_text(data.get("created")),
        edited=_text(data.get("edited")),
        source_url=_text(data.get("url")),
        **{name: _references(data.get(name)) for name in _REFERENCE_FIELDS},
    )


def normalize_many(raw: object) -> list[MovieRecord]:
    """Normalize a collection payload, preserving its order.

    ``None`` and an empty body both yield an empty list.
    """
    if raw is None:
        return []
    if isinstance(raw, Mapping):
        # Some deployments wrap collections as {"results": [...]}.
        raw = raw.get("results", raw.get("result", []))
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Iterable):
        return []
    return [normalize(item) for item in raw]


def format_release_date(value: str | None) -> str:
    """Render an ISO date for display, e.g. ``May 25, 1977``."""
    if not value:
        return UNKNOWN
    try:
        day = date.fromisoformat(value[:10])
    except ValueError:
        return value
    return f"{day.strftime('%B')} {day.day}, {day.year}"
