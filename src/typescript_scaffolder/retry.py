"""
Retry contract for generated API clients.

The TypeScript returned by build_retry_helper_impl_source() is embedded
verbatim into every `<fileBase>.requestWithRetry.ts`. request_with_retry()
is the same state machine in Python; the test-suite drives it to pin the
behaviour of the emitted code.
"""
from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, TypeVar

from .logger import LogSink, get_default_logger


DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_DELAY_MS = 250
DEFAULT_MULTIPLIER = 2.0
DEFAULT_RETRY_STATUSES: tuple[int, ...] = (429, 502, 503, 504)
DEFAULT_IDEMPOTENT_METHODS: tuple[str, ...] = ("GET", "HEAD", "PUT", "DELETE", "OPTIONS")

T = TypeVar("T")


# ============================================================
# Options
# ============================================================

@dataclass(frozen=True)
class RetryOptions:
    """Every field has its own default; overriding one leaves the rest alone."""
    enabled: bool = True
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_delay_ms: int = DEFAULT_INITIAL_DELAY_MS
    multiplier: float = DEFAULT_MULTIPLIER
    retry_statuses: tuple[int, ...] = DEFAULT_RETRY_STATUSES
    method: str = "GET"
    idempotent_methods: tuple[str, ...] = field(default=DEFAULT_IDEMPOTENT_METHODS)

    def is_idempotent(self) -> bool:
        return self.method.upper() in self.idempotent_methods


def compute_backoff_delay_ms(options: RetryOptions, attempt_number: int) -> int:
    """Delay before the next try; `attempt_number` is the already-incremented count (1 -> initial delay)."""
    return math.floor(options.initial_delay_ms * options.multiplier ** (attempt_number - 1))


def response_status(value: Any) -> Optional[int]:
    """Numeric status carried by a response-like value (attribute or mapping key), if any."""
    if isinstance(value, dict):
        status = value.get("status")
    else:
        status = getattr(value, "status", None)
    return status if isinstance(status, int) and not isinstance(status, bool) else None


def error_response(error: BaseException) -> Any:
    """The `.response` of an HTTP error; None marks a network error."""
    return getattr(error, "response", None)


async def _default_sleep(delay_ms: int) -> None:
    await asyncio.sleep(delay_ms / 1000)


# ============================================================
# Reference implementation
# ============================================================

async def request_with_retry(
    attempt: Callable[[], Awaitable[T]],
    options: RetryOptions,
    *,
    sleep: Callable[[int], Awaitable[None]] = _default_sleep,
) -> T:
    """
    Run `attempt` under the retry contract.

    Retryable results are returned as-is once attempts run out; retryable
    errors are re-raised once attempts run out.
    """
    if not options.enabled:
        return await attempt()

    is_idempotent = options.is_idempotent()
    attempt_number = 0

    while True:
        try:
            result = await attempt()
        except Exception as error:
            response = error_response(error)
            is_network_error = response is None
            status = None if is_network_error else response_status(response)
            is_retryable_http = status is not None and status in options.retry_statuses

            if not is_idempotent or (not is_network_error and not is_retryable_http):
                raise

            attempt_number += 1
            if attempt_number >= options.max_attempts:
                raise

            await sleep(compute_backoff_delay_ms(options, attempt_number))
            continue

        status = response_status(result)
        if not is_idempotent or status is None or status not in options.retry_statuses:
            return result

        attempt_number += 1
        if attempt_number >= options.max_attempts:
            return result

        await sleep(compute_backoff_delay_ms(options, attempt_number))


# ============================================================
# TypeScript emission
# ============================================================

def build_retry_wrapper_name(function_name: str, logger: LogSink | None = None) -> str:
    """GET_person -> requestWithRetry_GET_person"""
    if not function_name or not function_name.strip():
        (logger or get_default_logger()).warn(
            "build_retry_wrapper_name", 'Empty function name provided; defaulting to "requestWithRetry"'
        )
        return "requestWithRetry"
    return f"requestWithRetry_{function_name}"


def _ts_number_list(values: tuple[int, ...]) -> str:
    return "[" + ", ".join(str(value) for value in values) + "]"


def _ts_string_list(values: tuple[str, ...]) -> str:
    return "[" + ", ".join(f'"{value}"' for value in values) + "]"


RETRY_HELPER_IMPL_SOURCE = f"""const defaultRetryStatuses = {_ts_number_list(DEFAULT_RETRY_STATUSES)};
const defaultIdempotentMethods = {_ts_string_list(DEFAULT_IDEMPOTENT_METHODS)};

const sleep = (ms: number) => new Promise((resolve) => setTimeout(resolve, ms));

export async function requestWithRetryImpl<T>(
  attempt: () => Promise<T>,
  opts: RetryOptions
): Promise<T> {{
  const {{
    enabled,
    maxAttempts = {DEFAULT_MAX_ATTEMPTS},
    initialDelayMs = {DEFAULT_INITIAL_DELAY_MS},
    multiplier = {DEFAULT_MULTIPLIER},
    retryStatuses = defaultRetryStatuses,
    method = "GET",
    idempotentMethods = defaultIdempotentMethods,
  }} = opts;

  if (!enabled) {{
    return attempt();
  }}

  const isIdempotent = idempotentMethods.includes(method.toUpperCase());
  let attemptNum = 0;

  while (true) {{
    try {{
      const result: any = await attempt();
      const status: number | undefined =
        result && typeof result === "object" && "status" in result ? (result as any).status : undefined;

      if (!isIdempotent || status === undefined || !retryStatuses.includes(status)) {{
        return result;
      }}

      attemptNum++;
      if (attemptNum >= maxAttempts) {{
        return result;
      }}

      const delay = Math.floor(initialDelayMs * Math.pow(multiplier, attemptNum - 1));
      await sleep(delay);
    }} catch (e: any) {{
      // A response means an HTTP error; no response means a network error.
      const hasResponse = !!e?.response;
      const status: number | undefined = hasResponse ? e.response.status : undefined;
      const isRetryableHttp = hasResponse && status !== undefined && retryStatuses.includes(status);
      const isNetworkError = !hasResponse;

      if (!isIdempotent || (!isNetworkError && !isRetryableHttp)) {{
        throw e;
      }}

      attemptNum++;
      if (attemptNum >= maxAttempts) {{
        throw e;
      }}

      const delay = Math.floor(initialDelayMs * Math.pow(multiplier, attemptNum - 1));
      await sleep(delay);
    }}
  }}
}}
"""


def build_retry_helper_impl_source() -> str:
    """Canonical TS retry loop embedded in each generated helper module."""
    return RETRY_HELPER_IMPL_SOURCE


def build_endpoint_retry_wrapper_export(function_name: str, response_type: str) -> str:
    """One exported wrapper binding the concrete response type."""
    wrapper_name = build_retry_wrapper_name(function_name)
    return (
        f"export function {wrapper_name}(\n"
        f"  attempt: () => Promise<AxiosResponse<{response_type}>>,\n"
        f"  opts: RetryOptions\n"
        f"): Promise<AxiosResponse<{response_type}>> {{\n"
        f"  return requestWithRetryImpl<AxiosResponse<{response_type}>>(attempt, opts);\n"
        f"}}"
    )
