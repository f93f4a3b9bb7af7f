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

"""Shared fixtures: a fake ``google-genai`` client and response builders."""

from collections.abc import AsyncIterator, Callable, Iterable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from google.genai import types as genai_types


def build_response(
    *parts: genai_types.Part | str,
    finish_reason: genai_types.FinishReason | None = genai_types.FinishReason.STOP,
    usage: dict[str, int] | None = None,
    **candidate_fields: Any,
) -> genai_types.GenerateContentResponse:
    """A one-candidate response; plain strings become text parts."""
    content = genai_types.Content(
        role='model',
        parts=[genai_types.Part(text=p) if isinstance(p, str) else p for p in parts],
    )
    candidate = genai_types.Candidate(content=content, finish_reason=finish_reason, **candidate_fields)
    usage_metadata = genai_types.GenerateContentResponseUsageMetadata(**usage) if usage else None
    return genai_types.GenerateContentResponse(candidates=[candidate], usage_metadata=usage_metadata)


async def _aiter(items: Iterable[Any]) -> AsyncIterator[Any]:
    for item in items:
        if isinstance(item, BaseException):
            raise item
        yield item


@pytest.fixture
def make_response() -> Callable[..., genai_types.GenerateContentResponse]:
    return build_response


@pytest.fixture
def stream_of() -> Callable[[Iterable[Any]], AsyncIterator[Any]]:
    """Async iterator over chunks; an exception in the list is raised at that point."""
    return _aiter


@pytest.fixture
def client() -> MagicMock:
    """A client whose async surfaces are AsyncMocks."""
    fake = MagicMock(name='genai.Client')
    fake.aio.models.generate_content = AsyncMock()
    fake.aio.models.generate_content_stream = AsyncMock()
    fake.aio.models.count_tokens = AsyncMock()
    fake.aio.files.upload = AsyncMock()
    fake.aio.files.get = AsyncMock()
    return fake
