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

"""Tests for client construction."""

import pytest
from pytest_mock import MockerFixture

from genai_guide.client import make_client, make_http_options
from genai_guide.config import Settings
from genai_guide.constants import CLIENT_HEADER


@pytest.fixture(autouse=True)
def no_env_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv('GEMINI_API_KEY', raising=False)
    monkeypatch.delenv('GOOGLE_API_KEY', raising=False)


def test_make_http_options() -> None:
    options = make_http_options(Settings(request_timeout=30, api_version='v1alpha'))
    assert options.timeout == 30_000
    assert options.api_version == 'v1alpha'
    assert options.headers == {'x-goog-api-client': CLIENT_HEADER}


def test_make_client_with_settings_key(mocker: MockerFixture) -> None:
    mock_client = mocker.patch('genai_guide.client.genai.Client')
    settings = Settings(gemini_api_key='settings-key')

    client = make_client(settings)

    assert client is mock_client.return_value
    mock_client.assert_called_once_with(api_key='settings-key', http_options=make_http_options(settings))


def test_make_client_explicit_key_wins(mocker: MockerFixture) -> None:
    mock_client = mocker.patch('genai_guide.client.genai.Client')
    make_client(Settings(gemini_api_key='settings-key'), api_key='explicit')
    assert mock_client.call_args.kwargs['api_key'] == 'explicit'


def test_make_client_from_environment(mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch) -> None:
    mock_client = mocker.patch('genai_guide.client.genai.Client')
    monkeypatch.setenv('GOOGLE_API_KEY', 'env-key')
    make_client()
    assert mock_client.call_args.kwargs['api_key'] == 'env-key'


def test_make_client_without_key_raises() -> None:
    with pytest.raises(ValueError, match='GEMINI_API_KEY'):
        make_client(Settings(gemini_api_key=''))
