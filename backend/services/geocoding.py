"""Forward geocoding for address autocomplete using OpenStreetMap Nominatim.

Queries are biased to New Mexico by appending a fixed region suffix and
restricting results to the US. The response is mapped one-to-one onto
``Suggestion`` records in provider order; nothing is re-ranked or cached.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

import requests

from services.suggestion_types import Suggestion
from settings import settings

logger = logging.getLogger(__name__)
_session = requests.Session()

MIN_QUERY_LENGTH = 3
MAX_QUERY_LENGTH = 200
RESULT_LIMIT = 5
REGION_SUFFIX = ", New Mexico, USA"
COUNTRY_CODES = "us"
_LOG_QUERY_CHARS = 50

_UNSAFE_QUERY_RE = re.compile(r"<script|javascript:|data:", re.IGNORECASE)


def validate_query(query: Any) -> Optional[str]:
    """Return the trimmed query if it is worth sending upstream, else None."""
    if query is None or not isinstance(query, str):
        return None
    trimmed = query.strip()
    if len(trimmed) < MIN_QUERY_LENGTH:
        return None
    if len(trimmed) > MAX_QUERY_LENGTH:
        return None
    if _UNSAFE_QUERY_RE.search(trimmed):
        return None
    return trimmed


def _truncate_for_log(query: str) -> str:
    if len(query) <= _LOG_QUERY_CHARS:
        return query
    return query[:_LOG_QUERY_CHARS] + "..."


def _search_headers() -> Dict[str, str]:
    headers = {"User-Agent": settings.NOMINATIM_USER_AGENT}
    if settings.NOMINATIM_REFERER:
        headers["Referer"] = settings.NOMINATIM_REFERER
    return headers


def build_search_params(query: str) -> Dict[str, str]:
    return {
        "format": "json",
        "q": f"{query}{REGION_SUFFIX}",
        "limit": str(RESULT_LIMIT),
        "addressdetails": "1",
        "countrycodes": COUNTRY_CODES,
    }


def search_suggestions(
    query: str,
    *,
    session: Optional[requests.Session] = None,
) -> List[Suggestion]:
    """Search Nominatim for ``query`` and map the results to suggestions.

    Raises on transport errors, non-2xx provider responses and malformed
    payloads; callers decide how to degrade.
    """
    if settings.AUTOCOMPLETE_LOG_QUERIES:
        logger.info("Autocomplete query: %s", _truncate_for_log(query))

    http = session or _session
    resp = http.get(
        settings.NOMINATIM_SEARCH_URL,
        params=build_search_params(query),
        headers=_search_headers(),
        timeout=settings.NOMINATIM_TIMEOUT_SECONDS,
    )
    resp.raise_for_status()
    data = resp.json()
    if not isinstance(data, list):
        raise ValueError(f"Unexpected Nominatim payload type: {type(data).__name__}")

    logger.info("Nominatim returned %d suggestions", len(data))
    return [Suggestion.from_nominatim(item) for item in data]
