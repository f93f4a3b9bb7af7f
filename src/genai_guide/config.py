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

"""Guide settings.

Configuration is loaded with the following priority (highest wins):

1. CLI arguments          (``--model``, ``--log-format``)
2. Environment variables  (``export GEMINI_API_KEY=...``)
3. ``.<env>.env`` file    (e.g. ``.staging.env``)
4. ``.env`` file          (shared defaults)
5. Defaults defined in :class:`Settings`

``GEMINI_API_KEY`` is the preferred variable; ``GOOGLE_API_KEY`` is
accepted too, matching what the ``google-genai`` SDK itself reads.
"""

from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from genai_guide.constants import DEFAULT_IMAGE_MODEL, DEFAULT_MODEL


def _build_env_files(env: str | None) -> tuple[str, ...]:
    """Build the list of .env files to load, most specific last.

    pydantic-settings loads files left-to-right, with later files
    overriding earlier ones.
    """
    files: list[str] = ['.env']
    if env:
        files.append(f'.{env}.env')
    return tuple(files)


class Settings(BaseSettings):
    """Settings loaded from env vars and .env files."""

    model_config = SettingsConfigDict(
        env_file_encoding='utf-8',
        extra='ignore',
    )

    gemini_api_key: str = Field(
        default='',
        validation_alias=AliasChoices('gemini_api_key', 'google_api_key'),
    )
    model: str = DEFAULT_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    api_version: str | None = None

    # Seconds. The SDK expects milliseconds; see client.make_client.
    request_timeout: float = 120.0

    max_retries: int = Field(default=3, ge=0)
    retry_initial_delay: float = Field(default=1.0, gt=0)
    retry_max_delay: float = Field(default=30.0, gt=0)

    log_format: Literal['console', 'json'] = 'console'
    log_level: str = 'info'

    @field_validator('log_level')
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.lower()


def make_settings(env: str | None = None, **overrides: object) -> Settings:
    """Create Settings with the appropriate .env files for the environment.

    Args:
        env: Environment name; loads ``.<env>.env`` on top of ``.env``.
        **overrides: Values that win over everything else (CLI arguments).
            ``None`` values are ignored.

    Returns:
        The loaded settings.
    """
    env_files = _build_env_files(env)
    explicit = {k: v for k, v in overrides.items() if v is not None}
    return Settings(_env_file=env_files, **explicit)  # type: ignore[call-arg]
