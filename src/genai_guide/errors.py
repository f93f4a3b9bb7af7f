# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Errors raised by the guide and the remediation advice attached to them.

The Gemini API reports failures as HTTP status codes. Each code maps to a
canonical status name, whether a retry can help, and what an operator
should do about it:

| HTTP | Status                | Retry | Remediation                              |
|------|-----------------------|-------|------------------------------------------|
| 400  | `INVALID_ARGUMENT`    | no    | Fix the request body or parameters.      |
| 400  | `FAILED_PRECONDITION` | no    | Enable billing or use a supported region.|
| 403  | `PERMISSION_DENIED`   | no    | Check the API key and its permissions.   |
| 404  | `NOT_FOUND`           | no    | Check the model name or referenced file. |
| 429  | `RESOURCE_EXHAUSTED`  | yes   | Slow down, the rate limit was exceeded.  |
| 500  | `INTERNAL`            | yes   | Retry; shorten the input if it persists. |
| 503  | `UNAVAILABLE`         | yes   | Retry later or switch models.            |
| 504  | `DEADLINE_EXCEEDED`   | yes   | Raise the client timeout or shorten input.|
"""

from typing import Any, Literal

import httpx
from google.genai import errors as genai_errors
from pydantic import BaseModel

StatusName = Literal[
    'OK',
    'CANCELLED',
    'UNKNOWN',
    'INVALID_ARGUMENT',
    'DEADLINE_EXCEEDED',
    'NOT_FOUND',
    'ALREADY_EXISTS',
    'PERMISSION_DENIED',
    'UNAUTHENTICATED',
    'RESOURCE_EXHAUSTED',
    'FAILED_PRECONDITION',
    'ABORTED',
    'OUT_OF_RANGE',
    'UNIMPLEMENTED',
    'INTERNAL',
    'UNAVAILABLE',
]

_STATUS_TO_HTTP: dict[str, int] = {
    'OK': 200,
    'CANCELLED': 499,
    'UNKNOWN': 500,
    'INVALID_ARGUMENT': 400,
    'DEADLINE_EXCEEDED': 504,
    'NOT_FOUND': 404,
    'ALREADY_EXISTS': 409,
    'PERMISSION_DENIED': 403,
    'UNAUTHENTICATED': 401,
    'RESOURCE_EXHAUSTED': 429,
    'FAILED_PRECONDITION': 400,
    'ABORTED': 409,
    'OUT_OF_RANGE': 400,
    'UNIMPLEMENTED': 501,
    'INTERNAL': 500,
    'UNAVAILABLE': 503,
}

# First status wins for codes shared by several statuses (400, 409, 500).
_HTTP_TO_STATUS: dict[int, str] = {}
for _status in ('INVALID_ARGUMENT', 'ABORTED', 'INTERNAL', *_STATUS_TO_HTTP):
    _HTTP_TO_STATUS.setdefault(_STATUS_TO_HTTP[_status], _status)

RETRYABLE_STATUSES: frozenset[str] = frozenset({
    'RESOURCE_EXHAUSTED',
    'INTERNAL',
    'UNAVAILABLE',
    'DEADLINE_EXCEEDED',
})

_REMEDIATION: dict[str, str] = {
    'INVALID_ARGUMENT': 'The request is malformed. Check the request body, parameters and model-specific limits.',
    'FAILED_PRECONDITION': (
        'The free tier is not available in your country or billing is not enabled. '
        'Enable billing on the project that owns the API key.'
    ),
    'PERMISSION_DENIED': (
        'The API key lacks the required permissions. Check that the key is set correctly '
        'and has access to the requested model or tuned model.'
    ),
    'UNAUTHENTICATED': 'No valid credentials were sent. Set GEMINI_API_KEY or pass --api-key.',
    'NOT_FOUND': 'The requested resource was not found. Check the model name and any referenced files.',
    'RESOURCE_EXHAUSTED': 'You exceeded the rate limit. Slow down requests or request a quota increase.',
    'INTERNAL': (
        'An unexpected error occurred on the service side. Retry after a short wait; '
        'if it persists, shorten the input context or switch to another model.'
    ),
    'UNAVAILABLE': 'The service is temporarily overloaded or down. Retry later or switch to another model.',
    'DEADLINE_EXCEEDED': (
        'The service could not finish before the deadline. Increase the client timeout '
        '(REQUEST_TIMEOUT) or shorten the prompt.'
    ),
    'ABORTED': 'The operation was stopped before completing. Simplify the request and try again.',
}

_DEFAULT_REMEDIATION = 'Check the error details and the request that caused it.'


def http_status_code(status: str) -> int:
    """Return the HTTP status code for a canonical status name."""
    return _STATUS_TO_HTTP.get(status, 500)


def status_from_http(code: int | None) -> str:
    """Return the canonical status name for an HTTP status code."""
    if code is None:
        return 'UNKNOWN'
    if code in _HTTP_TO_STATUS:
        return _HTTP_TO_STATUS[code]
    if 400 <= code < 500:
        return 'INVALID_ARGUMENT'
    if code >= 500:
        return 'INTERNAL'
    return 'UNKNOWN'


class ErrorAdvice(BaseModel):
    """Operator-facing guidance for a failure."""

    status: str
    http_code: int
    retryable: bool
    remediation: str


def advice_for(status_or_code: str | int) -> ErrorAdvice:
    """Look up the advice for a status name or an HTTP status code.

    Args:
        status_or_code: Either a canonical status name (``'UNAVAILABLE'``)
            or an HTTP status code (``503``).

    Returns:
        The advice entry.
    """
    if isinstance(status_or_code, int):
        status = status_from_http(status_or_code)
        http_code = status_or_code
    else:
        status = status_or_code
        http_code = http_status_code(status)
    return ErrorAdvice(
        status=status,
        http_code=http_code,
        retryable=status in RETRYABLE_STATUSES,
        remediation=_REMEDIATION.get(status, _DEFAULT_REMEDIATION),
    )


class GuideError(Exception):
    """Base error class for failures surfaced by the guide."""

    def __init__(
        self,
        *,
        message: str,
        status: StatusName | None = None,
        http_code: int | None = None,
        cause: BaseException | None = None,
        details: Any = None,
    ) -> None:
        """Initialize a GuideError.

        Args:
            message: The error message.
            status: Canonical status name. Derived from ``http_code`` or
                ``cause`` when omitted, defaulting to ``INTERNAL``.
            http_code: HTTP status code reported by the service, if any.
            cause: The underlying exception.
            details: Optional extra information (raw response text, ...).
        """
        if not status and isinstance(cause, GuideError):
            status = cause.status  # type: ignore[assignment]
        if not status and http_code is not None:
            status = status_from_http(http_code)  # type: ignore[assignment]
        if not status:
            status = 'INTERNAL'

        super().__init__(f'{status}: {message}')
        self.message = message
        self.status: str = status
        self.http_code = http_code if http_code is not None else http_status_code(status)
        self.cause = cause
        self.details = details

    @property
    def advice(self) -> ErrorAdvice:
        """Advice for this error, keyed on its status."""
        advice = advice_for(self.status)
        return advice.model_copy(update={'http_code': self.http_code})

    @property
    def retryable(self) -> bool:
        """Whether retrying the same request can succeed."""
        return self.status in RETRYABLE_STATUSES

    @property
    def remediation(self) -> str:
        """What an operator should do about this error."""
        return self.advice.remediation


def from_exception(exc: BaseException) -> GuideError:
    """Translate an exception raised while talking to the service.

    Args:
        exc: The exception raised by the SDK or the HTTP transport.

    Returns:
        A GuideError carrying the canonical status and the original
        exception as its cause.
    """
    if isinstance(exc, GuideError):
        return exc
    if isinstance(exc, genai_errors.APIError):
        status = exc.status if exc.status in _STATUS_TO_HTTP else status_from_http(exc.code)
        return GuideError(
            message=exc.message or str(exc),
            status=status,  # type: ignore[arg-type]
            http_code=exc.code,
            cause=exc,
            details=exc.details,
        )
    if isinstance(exc, httpx.TimeoutException):
        return GuideError(message=f'request timed out: {exc}', status='DEADLINE_EXCEEDED', cause=exc)
    if isinstance(exc, httpx.TransportError):
        return GuideError(message=f'transport error: {exc}', status='UNAVAILABLE', cause=exc)
    return GuideError(message=str(exc) or type(exc).__name__, status='UNKNOWN', cause=exc)
