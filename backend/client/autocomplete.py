"""Debounced autocomplete state for one address input.

The coordinator is driven by input events (``on_query_change``,
``set_enabled``, ``on_destroy``) and publishes ``AutocompleteState`` snapshots
through an ``on_change`` callback. All state lives on the event loop the
coordinator was created on; only the blocking HTTP call runs in a worker
thread.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol, Set, Tuple

from client.functions_client import FunctionResult
from services.suggestion_types import Suggestion

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 3
DEBOUNCE_SECONDS = 0.3
FUNCTION_NAME = "autocomplete"


class FunctionCaller(Protocol):
    def call(self, function_name: str, body: dict) -> FunctionResult: ...


@dataclass(frozen=True)
class AutocompleteState:
    query: str
    suggestions: Tuple[Suggestion, ...]
    is_loading: bool


class AutocompleteCoordinator:
    def __init__(
        self,
        functions: FunctionCaller,
        *,
        enabled: bool = True,
        on_change: Optional[Callable[[AutocompleteState], None]] = None,
        debounce_seconds: float = DEBOUNCE_SECONDS,
    ) -> None:
        self._functions = functions
        self._loop = asyncio.get_running_loop()
        self._on_change = on_change
        self.debounce_seconds = debounce_seconds
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()
        self._destroyed = False

        self.query = ""
        self.enabled = enabled
        self.suggestions: List[Suggestion] = []
        self.is_loading = False

    @property
    def state(self) -> AutocompleteState:
        return AutocompleteState(self.query, tuple(self.suggestions), self.is_loading)

    def on_query_change(self, query: str) -> None:
        if self._destroyed:
            return
        self.query = query or ""
        self._restart_timer()

    def set_enabled(self, enabled: bool) -> None:
        if self._destroyed or enabled == self.enabled:
            return
        self.enabled = enabled
        self._restart_timer()

    def on_destroy(self) -> None:
        """Cancel any pending debounce; in-flight requests are left to finish."""
        self._destroyed = True
        self._cancel_timer()

    async def wait_idle(self) -> None:
        """Wait for every fetch started so far to settle."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _restart_timer(self) -> None:
        self._cancel_timer()
        self._timer = self._loop.call_later(self.debounce_seconds, self._fire)

    def _fire(self) -> None:
        self._timer = None
        task = self._loop.create_task(self._fetch(self.query, self.enabled))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _fetch(self, query: str, enabled: bool) -> None:
        if not query or len(query) < MIN_QUERY_LENGTH or not enabled:
            self._update(suggestions=[], is_loading=False)
            return

        self._update(is_loading=True)
        suggestions: List[Suggestion] = []
        try:
            result = await asyncio.to_thread(self._functions.call, FUNCTION_NAME, {"query": query})
            if result.error is not None:
                logger.warning("Autocomplete error for %r: %s", query, result.error)
            else:
                data = result.data or {}
                suggestions = [Suggestion.from_dict(s) for s in (data.get("suggestions") or [])]
        except Exception as exc:
            logger.warning("Autocomplete error for %r: %s", query, exc, exc_info=True)
            suggestions = []
        finally:
            self._update(suggestions=suggestions, is_loading=False)

    def _update(self, *, suggestions: Optional[List[Suggestion]] = None, is_loading: Optional[bool] = None) -> None:
        changed = False
        if suggestions is not None and suggestions != self.suggestions:
            self.suggestions = suggestions
            changed = True
        if is_loading is not None and is_loading != self.is_loading:
            self.is_loading = is_loading
            changed = True
        if changed and self._on_change is not None:
            try:
                self._on_change(self.state)
            except Exception:
                logger.exception("Autocomplete on_change callback failed")
