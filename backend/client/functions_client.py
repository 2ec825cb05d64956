"""
Thin HTTP client for invoking hosted functions by name.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from settings import FunctionsConfig

logger = logging.getLogger(__name__)


class FunctionInvocationError(Exception):
    def __init__(self, function_name: str, status_code: Optional[int] = None, reason: Optional[str] = None):
        self.function_name = function_name
        self.status_code = status_code
        detail = status_code if status_code is not None else (reason or "no response")
        super().__init__(f"Function {function_name} failed: {detail}")


@dataclass
class FunctionResult:
    data: Any = None
    error: Optional[FunctionInvocationError] = None


class FunctionsClient:
    def __init__(self, config: FunctionsConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.anon_key}",
            "apikey": self.config.anon_key,
            "Content-Type": "application/json",
        }

    def invoke(self, function_name: str, body: Any) -> Any:
        """POST ``body`` as JSON to the named function and return the parsed reply.

        Raises FunctionInvocationError on network failure, non-2xx status or an
        undecodable body. Never retries.
        """
        url = f"{self.config.functions_url}/{function_name}"
        try:
            resp = self.session.post(
                url,
                json=body,
                headers=self._headers(),
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise FunctionInvocationError(function_name, reason=str(exc)) from exc

        if not 200 <= resp.status_code < 300:
            raise FunctionInvocationError(function_name, status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError as exc:
            raise FunctionInvocationError(function_name, reason=f"invalid JSON body ({exc})") from exc

    def call(self, function_name: str, body: Any) -> FunctionResult:
        """Invoke and fold failures into ``FunctionResult.error`` instead of raising."""
        try:
            return FunctionResult(data=self.invoke(function_name, body))
        except FunctionInvocationError as exc:
            logger.debug("Function %s returned error: %s", function_name, exc)
            return FunctionResult(error=exc)
