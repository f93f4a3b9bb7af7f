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

"""The single request path every operation in the guide goes through.

``generate_content`` wraps the SDK call with an OpenTelemetry span,
translates SDK and transport exceptions into :class:`GuideError`, and
applies the retry policy. The response helpers below read the first
candidate of a ``GenerateContentResponse``.
"""

import json
from collections.abc import AsyncIterator
from typing import Any

import structlog
from google import genai
from google.genai import types as genai_types
from opentelemetry import trace
from pydantic import BaseModel

from genai_guide.errors import GuideError, from_exception
from genai_guide.retry import RetryPolicy, with_retries
from genai_guide.types import Usage

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

_MAX_ATTRIBUTE_LENGTH = 4096


def dump_json(value: Any, fallback: str = '[!! failed to serialize !!]') -> str:
    """Serialize request/response objects for span attributes."""

    def _default(obj: Any) -> Any:
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode='json', exclude_none=True)
        if isinstance(obj, bytes):
            return f'<{len(obj)} bytes>'
        return repr(obj)

    try:
        dumped = json.dumps(value, default=_default)
    except (TypeError, ValueError):
        return fallback
    if len(dumped) > _MAX_ATTRIBUTE_LENGTH:
        return dumped[:_MAX_ATTRIBUTE_LENGTH] + '...'
    return dumped


async def generate_content(
    client: genai.Client,
    *,
    model: str,
    contents: genai_types.ContentListUnion | genai_types.ContentListUnionDict,
    config: genai_types.GenerateContentConfig | None = None,
    policy: RetryPolicy | None = None,
) -> genai_types.GenerateContentResponse:
    """Call ``models.generate_content`` with tracing, error translation and retries.

    Args:
        client: The ``google-genai`` client.
        model: Model identifier, e.g. ``gemini-2.5-flash``.
        contents: Prompt text, parts or contents.
        config: Optional request configuration.
        policy: Retry policy for transient failures.

    Returns:
        The raw SDK response.

    Raises:
        GuideError: When the call fails.
    """
    with tracer.start_as_current_span('generate_content') as span:
        span.set_attribute('genai_guide:model', model)
        span.set_attribute(
            'genai_guide:input',
            dump_json({'config': config, 'contents': contents}),
        )
        response = await with_retries(
            lambda: client.aio.models.generate_content(model=model, contents=contents, config=config),
            policy,
        )
        span.set_attribute('genai_guide:output', dump_json(response))

    await logger.adebug('generate_content finished', model=model, **usage_from_response(response).model_dump())
    return response


async def generate_content_stream(
    client: genai.Client,
    *,
    model: str,
    contents: genai_types.ContentListUnion | genai_types.ContentListUnionDict,
    config: genai_types.GenerateContentConfig | None = None,
    policy: RetryPolicy | None = None,
) -> AsyncIterator[genai_types.GenerateContentResponse]:
    """Stream ``models.generate_content_stream`` chunks.

    Only opening the stream is retried; a failure mid-stream propagates
    as a :class:`GuideError` since chunks were already handed out.
    """
    # Not made current: the generator may be resumed from another context.
    span = tracer.start_span('generate_content_stream')
    span.set_attribute('genai_guide:model', model)
    span.set_attribute(
        'genai_guide:input',
        dump_json({'config': config, 'contents': contents}),
    )
    chunks = 0
    try:
        stream = await with_retries(
            lambda: client.aio.models.generate_content_stream(model=model, contents=contents, config=config),
            policy,
        )
        async for chunk in stream:
            chunks += 1
            yield chunk
    except GuideError:
        raise
    except Exception as e:
        raise from_exception(e) from e
    finally:
        span.set_attribute('genai_guide:chunks', chunks)
        span.end()


async def count_tokens(
    client: genai.Client,
    *,
    model: str,
    contents: genai_types.ContentListUnion | genai_types.ContentListUnionDict,
    policy: RetryPolicy | None = None,
) -> int:
    """Count the input tokens ``contents`` would use with ``model``."""
    with tracer.start_as_current_span('count_tokens') as span:
        span.set_attribute('genai_guide:model', model)
        response = await with_retries(
            lambda: client.aio.models.count_tokens(model=model, contents=contents),
            policy,
        )
        total = response.total_tokens or 0
        span.set_attribute('genai_guide:total_tokens', total)
    return total


def enum_value(value: Any) -> str | None:
    """The string value of an SDK enum (or enum-like string), or None."""
    if value is None:
        return None
    return getattr(value, 'value', None) or str(value)


def first_candidate(response: genai_types.GenerateContentResponse) -> genai_types.Candidate:
    """Return the first candidate, raising if the prompt was blocked.

    Raises:
        GuideError: ``FAILED_PRECONDITION`` when the response carries no
            candidates (typically a blocked prompt).
    """
    if not response.candidates:
        reason = None
        if response.prompt_feedback is not None:
            reason = enum_value(response.prompt_feedback.block_reason)
        raise GuideError(
            message=f'model returned no candidates (block reason: {reason or "unknown"})',
            status='FAILED_PRECONDITION',
            details={'block_reason': reason},
        )
    return response.candidates[0]


def response_parts(response: genai_types.GenerateContentResponse) -> list[genai_types.Part]:
    """Return the parts of the first candidate."""
    candidate = first_candidate(response)
    if candidate.content is None or not candidate.content.parts:
        return []
    return list(candidate.content.parts)


def response_text(response: genai_types.GenerateContentResponse, include_thoughts: bool = False) -> str:
    """Concatenate the text parts of the first candidate.

    Args:
        response: The SDK response.
        include_thoughts: Whether thought-summary parts count as text.
    """
    return ''.join(
        part.text for part in response_parts(response) if part.text and (include_thoughts or not part.thought)
    )


def finish_reason(response: genai_types.GenerateContentResponse) -> str | None:
    """Why generation stopped (``STOP``, ``MAX_TOKENS``, ``SAFETY``, ...)."""
    if not response.candidates:
        return None
    return enum_value(response.candidates[0].finish_reason)


def usage_from_response(response: genai_types.GenerateContentResponse) -> Usage:
    """Read token counts from ``usage_metadata``; missing counts are zero."""
    meta = response.usage_metadata
    if meta is None:
        return Usage()
    return Usage(
        input_tokens=meta.prompt_token_count or 0,
        output_tokens=meta.candidates_token_count or 0,
        thoughts_tokens=meta.thoughts_token_count or 0,
        cached_tokens=meta.cached_content_token_count or 0,
        tool_use_prompt_tokens=meta.tool_use_prompt_token_count or 0,
        total_tokens=meta.total_token_count or 0,
    )


def model_turn(response: genai_types.GenerateContentResponse) -> genai_types.Content:
    """The first candidate's content as a ``model`` turn for the history.

    The content is kept verbatim (it may carry thought signatures); only a
    missing role is filled in.
    """
    content = first_candidate(response).content
    if content is None or not content.parts:
        return genai_types.Content(role='model', parts=[genai_types.Part(text=response_text(response))])
    if content.role != 'model':
        return content.model_copy(update={'role': 'model'})
    return content
