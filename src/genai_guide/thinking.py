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

"""Reasoning control: thinking budgets, thinking levels and thought summaries.

Key Concepts::

    ┌───────────────────┬──────────────────────────────────────────────────┐
    │ Concept           │ Meaning                                          │
    ├───────────────────┼──────────────────────────────────────────────────┤
    │ Thinking budget   │ Max tokens the model may spend reasoning before  │
    │                   │ it answers. 0 turns thinking off, -1 lets the    │
    │                   │ model decide.                                    │
    ├───────────────────┼──────────────────────────────────────────────────┤
    │ Thinking level    │ Coarse effort (MINIMAL..HIGH) for models that    │
    │                   │ take a level instead of a budget.                │
    ├───────────────────┼──────────────────────────────────────────────────┤
    │ Thought summaries │ Parts flagged ``thought=True`` that summarize    │
    │                   │ the reasoning; returned only when requested.     │
    └───────────────────┴──────────────────────────────────────────────────┘
"""

from google import genai
from google.genai import types as genai_types
from pydantic import BaseModel, model_validator

from genai_guide.constants import DEFAULT_MODEL
from genai_guide.generate import generate_content, response_parts, usage_from_response
from genai_guide.retry import RetryPolicy
from genai_guide.types import ThinkingLevel, ThinkingResult

DYNAMIC_BUDGET = -1


class ThinkingOptions(BaseModel):
    """How much the model should think, and whether to show it."""

    budget: int | None = None
    level: ThinkingLevel | None = None
    include_thoughts: bool = False

    @model_validator(mode='after')
    def _check(self) -> 'ThinkingOptions':
        if self.budget is not None and self.budget < DYNAMIC_BUDGET:
            raise ValueError(f'thinking budget must be -1 (dynamic) or >= 0, got {self.budget}')
        if self.budget is not None and self.level is not None:
            raise ValueError('thinking budget and thinking level are mutually exclusive')
        return self

    def to_config(self) -> genai_types.ThinkingConfig:
        return genai_types.ThinkingConfig(
            thinking_budget=self.budget,
            thinking_level=self.level.value if self.level else None,
            include_thoughts=self.include_thoughts or None,
        )


async def generate_with_thinking(
    client: genai.Client,
    prompt: str,
    options: ThinkingOptions | None = None,
    *,
    model: str = DEFAULT_MODEL,
    policy: RetryPolicy | None = None,
) -> ThinkingResult:
    """Generate an answer under a reasoning budget.

    Args:
        client: The ``google-genai`` client.
        prompt: The prompt.
        options: Budget/level and whether to return thought summaries.
        model: A thinking-capable model.
        policy: Retry policy.

    Returns:
        The answer, any thought summaries, and the thinking token count.
    """
    options = options or ThinkingOptions()
    config = genai_types.GenerateContentConfig(thinking_config=options.to_config())
    response = await generate_content(client, model=model, contents=prompt, config=config, policy=policy)

    answer: list[str] = []
    thoughts: list[str] = []
    for part in response_parts(response):
        if not part.text:
            continue
        if part.thought:
            thoughts.append(part.text)
        else:
            answer.append(part.text)

    usage = usage_from_response(response)
    return ThinkingResult(
        answer=''.join(answer),
        thoughts=thoughts,
        thoughts_token_count=usage.thoughts_tokens,
        usage=usage,
    )
