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

"""Construction of the ``google-genai`` client."""

import os

import structlog
from google import genai
from google.genai import types as genai_types

from genai_guide.config import Settings
from genai_guide.constants import CLIENT_HEADER, GEMINI_API_KEY_ENV, GOOGLE_API_KEY_ENV

logger = structlog.get_logger(__name__)


def _resolve_api_key(settings: Settings | None, api_key: str | None) -> str | None:
    if api_key:
        return api_key
    if settings and settings.gemini_api_key:
        return settings.gemini_api_key
    return os.getenv(GEMINI_API_KEY_ENV) or os.getenv(GOOGLE_API_KEY_ENV)


def make_http_options(settings: Settings | None = None) -> genai_types.HttpOptions:
    """Build the HTTP options for the client.

    Args:
        settings: Guide settings; ``None`` uses the defaults.

    Returns:
        HTTP options with the timeout in milliseconds and the attribution header.
    """
    settings = settings or Settings()
    return genai_types.HttpOptions(
        api_version=settings.api_version,
        timeout=int(settings.request_timeout * 1000),
        headers={'x-goog-api-client': CLIENT_HEADER},
    )


def make_client(settings: Settings | None = None, api_key: str | None = None) -> genai.Client:
    """Create a Gemini Developer API client.

    Args:
        settings: Guide settings; ``None`` uses the defaults.
        api_key: Explicit API key, overriding settings and environment.

    Returns:
        A configured ``genai.Client``.

    Raises:
        ValueError: If no API key can be found.
    """
    key = _resolve_api_key(settings, api_key)
    if not key:
        raise ValueError(
            f'Gemini api key should be passed explicitly or as a {GEMINI_API_KEY_ENV} environment variable'
        )
    http_options = make_http_options(settings)
    logger.debug('creating client', api_version=http_options.api_version, timeout_ms=http_options.timeout)
    return genai.Client(api_key=key, http_options=http_options)
