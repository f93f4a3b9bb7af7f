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

"""Tests for the error taxonomy."""

import httpx
import pytest
from google.genai import errors as genai_errors

from genai_guide.errors import (
    GuideError,
    advice_for,
    from_exception,
    http_status_code,
    status_from_http,
)


def _api_error(code: int, status: str, message: str = 'boom') -> genai_errors.APIError:
    cls = genai_errors.ClientError if code < 500 else genai_errors.ServerError
    return cls(code, {'error': {'code': code, 'message': message, 'status': status}})


@pytest.mark.parametrize(
    'code, status, retryable',
    [
        (400, 'INVALID_ARGUMENT', False),
        (403, 'PERMISSION_DENIED', False),
        (404, 'NOT_FOUND', False),
        (429, 'RESOURCE_EXHAUSTED', True),
        (500, 'INTERNAL', True),
        (503, 'UNAVAILABLE', True),
        (504, 'DEADLINE_EXCEEDED', True),
    ],
)
def test_advice_for_http_code(code: int, status: str, retryable: bool) -> None:
    advice = advice_for(code)
    assert advice.status == status
    assert advice.http_code == code
    assert advice.retryable is retryable
    assert advice.remediation


def test_advice_for_failed_precondition() -> None:
    """400 FAILED_PRECONDITION points at billing/region, not the request body."""
    advice = advice_for('FAILED_PRECONDITION')
    assert advice.http_code == 400
    assert not advice.retryable
    assert 'billing' in advice.remediation


def test_status_from_http_fallbacks() -> None:
    assert status_from_http(None) == 'UNKNOWN'
    assert status_from_http(418) == 'INVALID_ARGUMENT'
    assert status_from_http(502) == 'INTERNAL'
    assert status_from_http(302) == 'UNKNOWN'


def test_http_status_code() -> None:
    assert http_status_code('RESOURCE_EXHAUSTED') == 429
    assert http_status_code('NOT_A_STATUS') == 500


def test_guide_error_defaults() -> None:
    error = GuideError(message='something broke')
    assert error.status == 'INTERNAL'
    assert error.http_code == 500
    assert error.retryable
    assert str(error) == 'INTERNAL: something broke'


def test_guide_error_status_from_http_code() -> None:
    error = GuideError(message='slow down', http_code=429)
    assert error.status == 'RESOURCE_EXHAUSTED'
    assert 'rate limit' in error.remediation


def test_guide_error_status_from_cause() -> None:
    cause = GuideError(message='inner', status='NOT_FOUND')
    assert GuideError(message='outer', cause=cause).status == 'NOT_FOUND'


def test_from_exception_api_error() -> None:
    error = from_exception(_api_error(429, 'RESOURCE_EXHAUSTED', 'Resource has been exhausted'))
    assert error.status == 'RESOURCE_EXHAUSTED'
    assert error.http_code == 429
    assert error.retryable
    assert 'Resource has been exhausted' in error.message
    assert isinstance(error.cause, genai_errors.ClientError)


def test_from_exception_api_error_unknown_status_uses_code() -> None:
    error = from_exception(_api_error(503, 'SOMETHING_NEW'))
    assert error.status == 'UNAVAILABLE'
    assert error.http_code == 503


def test_from_exception_failed_precondition_keeps_400() -> None:
    error = from_exception(_api_error(400, 'FAILED_PRECONDITION'))
    assert error.status == 'FAILED_PRECONDITION'
    assert error.http_code == 400
    assert not error.retryable


def test_from_exception_transport_errors() -> None:
    assert from_exception(httpx.ReadTimeout('slow')).status == 'DEADLINE_EXCEEDED'
    assert from_exception(httpx.ConnectError('refused')).status == 'UNAVAILABLE'


def test_from_exception_passthrough_and_unknown() -> None:
    original = GuideError(message='x', status='ABORTED')
    assert from_exception(original) is original

    error = from_exception(RuntimeError('weird'))
    assert error.status == 'UNKNOWN'
    assert error.message == 'weird'
