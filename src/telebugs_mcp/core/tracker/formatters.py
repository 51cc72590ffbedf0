# src/telebugs_mcp/core/tracker/formatters.py
"""Value conversion helpers for rows read from the tracker database."""

import json
from datetime import UTC, datetime
from typing import Any

# Rails writes SQLite datetimes in this layout; we match it so text range
# comparisons stay consistent across rows written by either side.
_RAILS_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-standard JSON constant {token}")


def lenient_json(raw: str | None) -> Any:
    """Parse a JSON text column, falling back to the raw text.

    Stored payloads come from arbitrary client SDKs and are not guaranteed to
    be valid JSON. A malformed payload is returned verbatim so one bad field
    never aborts a whole report. NaN and Infinity count as malformed: they
    would be written back out as bare tokens no JSON client can parse.
    Nesting deeper than the decoder's recursion limit is treated the same way.

    Returns:
        None for NULL or empty text, the decoded value when the text is valid
        JSON, otherwise the raw text unchanged.
    """
    if not raw:
        return None
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return raw


def utc_timestamp(now: datetime | None = None) -> str:
    """Format a UTC timestamp the way Rails stores it in SQLite."""
    moment = now if now is not None else datetime.now(UTC)
    return moment.astimezone(UTC).strftime(_RAILS_TIMESTAMP_FORMAT)


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the value matches literally (escape char is backslash)."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def fts_phrase_query(query: str) -> str:
    """Quote each whitespace-separated term of a free-text search.

    FTS5 treats unquoted input as query syntax, so a stray quote or operator
    in user input would be a syntax error. Quoting every term keeps the
    search an implicit AND of literal terms. A trailing ``*`` stays outside
    the quotes and makes that term a prefix match; a term of nothing but
    ``*`` is dropped.
    """
    quoted = []
    for term in query.split():
        prefix = term.endswith("*")
        text = term.rstrip("*")
        if not text:
            continue
        quoted.append('"' + text.replace('"', '""') + '"' + ("*" if prefix else ""))
    return " ".join(quoted)
