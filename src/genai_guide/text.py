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

"""Text generation and long-context input.

| Feature                         | Function                  |
|---------------------------------|---------------------------|
| Prompt in, text out             | `generate_text`           |
| System instructions and config  | `generate_text`           |
| Streaming                       | `stream_text`             |
| Long-context input              | `generate_from_long_text` |
"""

from collections.abc import AsyncIterator, Iterable
from pathlib import Path

import structlog
from google import genai
from google.genai import types as genai_types

from genai_guide.constants import DEFAULT_MODEL, LONG_CONTEXT_TOKEN_LIMIT
from genai_guide.errors import GuideError
from genai_guide.generate import (
    count_tokens,
    finish_reason,
    generate_content,
    generate_content_stream,
    response_text,
    usage_from_response,
)
from genai_guide.retry import RetryPolicy
from genai_guide.types import TextResult

logger = structlog.get_logger(__name__)


def build_config(
    *,
    system_instruction: str | None = None,
    temperature: float | None = None,
    max_output_tokens: int | None = None,
) -> genai_types.GenerateContentConfig | None:
    """Build a request config, or ``None`` when nothing is set."""
    if system_instruction is None and temperature is None and max_output_tokens is None:
        return None
    return genai_types.GenerateContentConfig(
        system_instruction=system_instruction,
        temperature=temperature,
        max_output_tokens=max_output_tokens,
    )


async def generate_text(
    client: genai.Client,
    prompt: str,
    *,
    model: str = DEFAULT_MODEL,
    system_instruction: str | None = None,
    temperature: float | None = None,
    max_output_tokens: int | None = None,
    policy: RetryPolicy | None = None,
) -> TextResult:
    """Generate text from a text prompt.

    Args:
        client: The ``google-genai`` client.
        prompt: The prompt.
        model: Model identifier.
        system_instruction: Optional system instruction.
        temperature: Optional sampling temperature.
        max_output_tokens: Optional cap on the answer length.
        policy: Retry policy.

    Returns:
        The answer with its token usage.
    """
    config = build_config(
        system_instruction=system_instruction,
        temperature=temperature,
        max_output_tokens=max_output_tokens,
    )
    response = await generate_content(client, model=model, contents=prompt, config=config, policy=policy)
    return TextResult(
        text=response_text(response),
        usage=usage_from_response(response),
        finish_reason=finish_reason(response),
    )


async def stream_text(
    client: genai.Client,
    prompt: str,
    *,
    model: str = DEFAULT_MODEL,
    system_instruction: str | None = None,
    temperature: float | None = None,
    policy: RetryPolicy | None = None,
) -> AsyncIterator[str]:
    """Yield the answer as it is generated.

    Chunks without text (e.g. a final usage-only chunk) are skipped.
    """
    config = build_config(system_instruction=system_instruction, temperature=temperature)
    async for chunk in generate_content_stream(client, model=model, contents=prompt, config=config, policy=policy):
        if not chunk.candidates:
            continue
        text = response_text(chunk)
        if text:
            yield text


def load_text_files(paths: Iterable[str | Path]) -> str:
    """Concatenate text files, each preceded by a header naming it."""
    sections = []
    for path in paths:
        path = Path(path)
        sections.append(f'--- {path.name} ---\n{path.read_text(encoding="utf-8")}')
    return '\n\n'.join(sections)


async def generate_from_long_text(
    client: genai.Client,
    text: str,
    question: str,
    *,
    model: str = DEFAULT_MODEL,
    token_limit: int = LONG_CONTEXT_TOKEN_LIMIT,
    policy: RetryPolicy | None = None,
) -> TextResult:
    """Answer a question about a large body of text.

    The whole text goes into the prompt; the model's context window does
    the rest. Tokens are counted first so an oversized input fails fast
    with advice instead of a 400/500 from the service.

    Raises:
        GuideError: ``INVALID_ARGUMENT`` when the input exceeds ``token_limit``.
    """
    contents = [text, question]
    tokens = await count_tokens(client, model=model, contents=contents, policy=policy)
    await logger.ainfo('long context input', model=model, tokens=tokens, token_limit=token_limit)
    if tokens > token_limit:
        raise GuideError(
            message=f'input is {tokens} tokens, over the {token_limit} token limit of {model}; shorten the input',
            status='INVALID_ARGUMENT',
            details={'tokens': tokens, 'token_limit': token_limit},
        )
    response = await generate_content(client, model=model, contents=contents, policy=policy)
    return TextResult(
        text=response_text(response),
        usage=usage_from_response(response),
        finish_reason=finish_reason(response),
    )
