"""
Autocomplete function route.

Proxies address fragments to Nominatim and returns normalized suggestions.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from services.geocoding import search_suggestions, validate_query
from services.suggestion_types import Suggestion

router = APIRouter()
logger = logging.getLogger(__name__)

AUTOCOMPLETE_FAILED = "Autocomplete failed"


class SuggestionResponse(BaseModel):
    displayName: Optional[str] = None
    lat: float
    lng: float
    type: Optional[str] = None
    importance: Optional[float] = None


class AutocompleteResponse(BaseModel):
    suggestions: List[SuggestionResponse] = Field(default_factory=list)
    error: Optional[str] = None


def suggestions_to_response(suggestions: List[Suggestion]) -> AutocompleteResponse:
    """Convert domain suggestions to the API response."""
    return AutocompleteResponse(
        suggestions=[SuggestionResponse(**s.to_dict()) for s in suggestions]
    )


def _json(payload: AutocompleteResponse, status_code: int = 200) -> JSONResponse:
    # only the top-level error is optional on the wire; suggestion fields keep nulls
    content = payload.model_dump()
    if content["error"] is None:
        del content["error"]
    return JSONResponse(content, status_code=status_code)


@router.post("/autocomplete", response_model=AutocompleteResponse)
async def autocomplete(request: Request):
    """
    Return up to five place suggestions for a partial address.

    Short, missing or unsafe queries yield an empty list rather than an error.
    """
    try:
        body = await request.json()
        if body is None:
            raise ValueError("Request body is JSON null")
        query = validate_query(body.get("query")) if isinstance(body, dict) else None
        if query is None:
            return _json(AutocompleteResponse())

        suggestions = await run_in_threadpool(search_suggestions, query)
        return _json(suggestions_to_response(suggestions))
    except Exception:
        logger.exception("Autocomplete error")
        return _json(AutocompleteResponse(error=AUTOCOMPLETE_FAILED), status_code=500)
