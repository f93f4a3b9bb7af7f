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

"""Structured output: JSON answers validated against a pydantic schema.

Usage::

    class Recipe(BaseModel):
        recipe_name: str
        ingredients: list[str]

    recipes = await generate_structured(client, 'List a few cookie recipes.', list[Recipe])
"""

import json
from enum import Enum
from typing import Any, TypeVar

import structlog
from google import genai
from google.genai import types as genai_types
from pydantic import TypeAdapter, ValidationError

from genai_guide.constants import DEFAULT_MODEL
from genai_guide.errors import GuideError
from genai_guide.generate import generate_content, response_text
from genai_guide.retry import RetryPolicy
from genai_guide.schema import to_gemini_schema

logger = structlog.get_logger(__name__)

T = TypeVar('T')
E = TypeVar('E', bound=Enum)


def json_config(output_type: Any) -> genai_types.GenerateContentConfig:
    """Request config asking for JSON that matches ``output_type``."""
    json_schema = TypeAdapter(output_type).json_schema()
    return genai_types.GenerateContentConfig(
        response_mime_type='application/json',
        response_schema=to_gemini_schema(json_schema),
    )


async def generate_structured(
    client: genai.Client,
    prompt: str,
    output_type: type[T],
    *,
    model: str = DEFAULT_MODEL,
    policy: RetryPolicy | None = None,
) -> T:
    """Generate a JSON answer and parse it into ``output_type``.

    Args:
        client: The ``google-genai`` client.
        prompt: The prompt.
        output_type: A pydantic model, or any type pydantic can validate
            (``list[Model]``, ``dict[str, int]``, ...).
        model: Model identifier.
        policy: Retry policy.

    Returns:
        The validated value.

    Raises:
        GuideError: ``INTERNAL`` when the answer does not match the schema;
            the raw answer is kept in ``details``.
    """
    response = await generate_content(
        client, model=model, contents=prompt, config=json_config(output_type), policy=policy
    )
    raw = response_text(response)
    try:
        return TypeAdapter(output_type).validate_json(raw)
    except ValidationError as e:
        await logger.awarning('structured output failed validation', errors=e.error_count())
        raise GuideError(
            message=f'model output does not match the requested schema: {e.error_count()} error(s)',
            status='INTERNAL',
            cause=e,
            details={'raw': raw},
        ) from e


async def generate_enum(
    client: genai.Client,
    prompt: str | list[Any],
    choices: type[E],
    *,
    model: str = DEFAULT_MODEL,
    policy: RetryPolicy | None = None,
) -> E:
    """Constrain the answer to one value of an enum (``text/x.enum``)."""
    config = genai_types.GenerateContentConfig(
        response_mime_type='text/x.enum',
        response_schema=genai_types.Schema(
            type=genai_types.Type.STRING,
            enum=[str(c.value) for c in choices],
        ),
    )
    response = await generate_content(client, model=model, contents=prompt, config=config, policy=policy)
    raw = response_text(response).strip()
    for choice in choices:
        if str(choice.value) == raw:
            return choice
    raise GuideError(
        message=f'model answered {raw!r}, not one of {[str(c.value) for c in choices]}',
        status='INTERNAL',
        details={'raw': raw},
    )


async def generate_json(
    client: genai.Client,
    prompt: str,
    json_schema: dict[str, Any] | None = None,
    *,
    model: str = DEFAULT_MODEL,
    policy: RetryPolicy | None = None,
) -> Any:
    """Generate JSON, optionally constrained by a raw JSON schema, and parse it.

    Raises:
        GuideError: ``INTERNAL`` when the answer is not valid JSON.
    """
    config = genai_types.GenerateContentConfig(
        response_mime_type='application/json',
        response_schema=to_gemini_schema(json_schema) if json_schema else None,
    )
    response = await generate_content(client, model=model, contents=prompt, config=config, policy=policy)
    raw = response_text(response)
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise GuideError(
            message=f'model output is not valid JSON: {e}',
            status='INTERNAL',
            cause=e,
            details={'raw': raw},
        ) from e
