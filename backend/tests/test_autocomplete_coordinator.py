import asyncio
from unittest.mock import MagicMock

from client.autocomplete import DEBOUNCE_SECONDS, AutocompleteCoordinator
from client.functions_client import FunctionInvocationError, FunctionResult, FunctionsClient
from services.suggestion_types import Suggestion
from settings import FunctionsConfig

FAST = 0.02

SANTA_FE = {"displayName": "Santa Fe, New Mexico, United States", "lat": 35.687, "lng": -105.9378, "type": "city", "importance": 0.75}
TAOS = {"displayName": "Taos, New Mexico, United States", "lat": 36.4072, "lng": -105.5731, "type": "town", "importance": 0.6}


class FakeFunctions:
    def __init__(self, result=None, exc=None):
        self.result = result if result is not None else FunctionResult(data={"suggestions": []})
        self.exc = exc
        self.calls = []

    def call(self, function_name, body):
        self.calls.append((function_name, body))
        if self.exc is not None:
            raise self.exc
        return self.result


async def _settle(coordinator, delay=FAST * 4):
    await asyncio.sleep(delay)
    await coordinator.wait_idle()


def test_short_or_empty_query_never_calls_function():
    async def scenario():
        functions = FakeFunctions()
        coordinator = AutocompleteCoordinator(functions, debounce_seconds=FAST)
        for q in ("", "a", "ab"):
            coordinator.on_query_change(q)
            await _settle(coordinator)
            assert coordinator.suggestions == []
            assert coordinator.is_loading is False
        return functions

    functions = asyncio.run(scenario())
    assert functions.calls == []


def test_fetch_fires_once_after_debounce_window():
    async def scenario():
        functions = FakeFunctions(FunctionResult(data={"suggestions": [SANTA_FE]}))
        coordinator = AutocompleteCoordinator(functions)
        coordinator.on_query_change("santa fe")
        await asyncio.sleep(DEBOUNCE_SECONDS * 0.5)
        calls_before = len(functions.calls)
        await _settle(coordinator, delay=DEBOUNCE_SECONDS * 0.5 + 0.15)
        return functions, calls_before, coordinator.state

    functions, calls_before, state = asyncio.run(scenario())
    assert calls_before == 0
    assert functions.calls == [("autocomplete", {"query": "santa fe"})]
    assert state.suggestions == (Suggestion.from_dict(SANTA_FE),)
    assert state.is_loading is False


def test_rapid_typing_issues_single_call_with_final_value():
    async def scenario():
        functions = FakeFunctions(FunctionResult(data={"suggestions": [SANTA_FE]}))
        coordinator = AutocompleteCoordinator(functions, debounce_seconds=0.05)
        typed = ""
        for ch in "santa fe":
            typed += ch
            coordinator.on_query_change(typed)
            await asyncio.sleep(0.005)
        await _settle(coordinator, delay=0.15)
        return functions

    functions = asyncio.run(scenario())
    assert functions.calls == [("autocomplete", {"query": "santa fe"})]


def test_loading_flag_brackets_the_request():
    states = []

    async def scenario():
        functions = FakeFunctions(FunctionResult(data={"suggestions": [SANTA_FE, TAOS]}))
        coordinator = AutocompleteCoordinator(functions, on_change=states.append, debounce_seconds=FAST)
        coordinator.on_query_change("new mexico")
        await _settle(coordinator)
        return coordinator

    coordinator = asyncio.run(scenario())
    assert states[0].is_loading is True
    assert states[-1].is_loading is False
    assert [s.display_name for s in states[-1].suggestions] == [SANTA_FE["displayName"], TAOS["displayName"]]
    assert coordinator.is_loading is False


def test_missing_suggestions_field_defaults_to_empty():
    async def scenario():
        coordinator = AutocompleteCoordinator(FakeFunctions(FunctionResult(data={})), debounce_seconds=FAST)
        coordinator.on_query_change("santa fe")
        await _settle(coordinator)
        return coordinator.state

    state = asyncio.run(scenario())
    assert state.suggestions == ()
    assert state.is_loading is False


def test_error_result_clears_suggestions():
    async def scenario():
        functions = FakeFunctions(FunctionResult(data={"suggestions": [SANTA_FE]}))
        coordinator = AutocompleteCoordinator(functions, debounce_seconds=FAST)
        coordinator.on_query_change("santa fe")
        await _settle(coordinator)
        assert len(coordinator.suggestions) == 1

        functions.result = FunctionResult(error=FunctionInvocationError("autocomplete", status_code=500))
        coordinator.on_query_change("santa fe plaza")
        await _settle(coordinator)
        return coordinator.state

    state = asyncio.run(scenario())
    assert state.suggestions == ()
    assert state.is_loading is False


def test_exception_during_call_is_swallowed():
    async def scenario():
        coordinator = AutocompleteCoordinator(FakeFunctions(exc=RuntimeError("boom")), debounce_seconds=FAST)
        coordinator.on_query_change("santa fe")
        await _settle(coordinator)
        return coordinator.state

    state = asyncio.run(scenario())
    assert state.suggestions == ()
    assert state.is_loading is False


def test_http_503_from_function_degrades_to_empty_state():
    session = MagicMock()
    resp = MagicMock()
    resp.status_code = 503
    session.post.return_value = resp
    client = FunctionsClient(FunctionsConfig(base_url="https://project.example.co", anon_key="anon"), session=session)

    async def scenario():
        coordinator = AutocompleteCoordinator(client, debounce_seconds=FAST)
        coordinator.on_query_change("santa fe")
        await _settle(coordinator)
        return coordinator.state

    state = asyncio.run(scenario())
    assert session.post.call_count == 1
    assert state.suggestions == ()
    assert state.is_loading is False


def test_disabling_clears_suggestions_without_calling():
    async def scenario():
        functions = FakeFunctions(FunctionResult(data={"suggestions": [SANTA_FE]}))
        coordinator = AutocompleteCoordinator(functions, debounce_seconds=FAST)
        coordinator.on_query_change("santa fe")
        await _settle(coordinator)
        assert len(coordinator.suggestions) == 1

        coordinator.set_enabled(False)
        await _settle(coordinator)
        return functions, coordinator.state

    functions, state = asyncio.run(scenario())
    assert len(functions.calls) == 1
    assert state.suggestions == ()
    assert state.is_loading is False


def test_disabled_from_start_never_calls():
    async def scenario():
        functions = FakeFunctions()
        coordinator = AutocompleteCoordinator(functions, enabled=False, debounce_seconds=FAST)
        coordinator.on_query_change("santa fe")
        await _settle(coordinator)
        return functions

    assert asyncio.run(scenario()).calls == []


def test_destroy_cancels_pending_timer():
    async def scenario():
        functions = FakeFunctions()
        coordinator = AutocompleteCoordinator(functions, debounce_seconds=FAST)
        coordinator.on_query_change("santa fe")
        coordinator.on_destroy()
        await _settle(coordinator)
        coordinator.on_query_change("taos")
        await _settle(coordinator)
        return functions

    assert asyncio.run(scenario()).calls == []


def test_failing_change_callback_does_not_break_fetch():
    def explode(state):
        raise RuntimeError("render failed")

    async def scenario():
        functions = FakeFunctions(FunctionResult(data={"suggestions": [TAOS]}))
        coordinator = AutocompleteCoordinator(functions, on_change=explode, debounce_seconds=FAST)
        coordinator.on_query_change("taos")
        await _settle(coordinator)
        return coordinator.state

    state = asyncio.run(scenario())
    assert [s.display_name for s in state.suggestions] == [TAOS["displayName"]]
    assert state.is_loading is False


def test_set_enabled_with_unchanged_flag_does_not_restart_debounce():
    async def scenario():
        functions = FakeFunctions(FunctionResult(data={"suggestions": [SANTA_FE]}))
        coordinator = AutocompleteCoordinator(functions, debounce_seconds=0.1)
        coordinator.on_query_change("santa fe")
        await asyncio.sleep(0.06)
        coordinator.set_enabled(True)
        await asyncio.sleep(0.07)
        calls_at_original_deadline = len(functions.calls)
        await _settle(coordinator, delay=0.1)
        return functions, calls_at_original_deadline

    functions, calls_at_original_deadline = asyncio.run(scenario())
    assert calls_at_original_deadline == 1
    assert functions.calls == [("autocomplete", {"query": "santa fe"})]
