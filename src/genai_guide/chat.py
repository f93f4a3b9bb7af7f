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

"""Multi-turn chat.

The service is stateless: every turn sends the whole conversation.
:class:`ChatSession` keeps that history and commits a turn only once the
model has answered, so a failed call can simply be retried.
"""

from collections.abc import AsyncIterator

import structlog
from google import genai
from google.genai import types as genai_types

from genai_guide.constants import DEFAULT_MODEL
from genai_guide.generate import (
    generate_content,
    generate_content_stream,
    model_turn,
    response_text,
    usage_from_response,
)
from genai_guide.retry import RetryPolicy
from genai_guide.types import Usage

logger = structlog.get_logger(__name__)


def user_content(text: str) -> genai_types.Content:
    return genai_types.Content(role='user', parts=[genai_types.Part(text=text)])


def model_content(text: str) -> genai_types.Content:
    return genai_types.Content(role='model', parts=[genai_types.Part(text=text)])


class ChatSession:
    """A conversation with a model."""

    def __init__(
        self,
        client: genai.Client,
        *,
        model: str = DEFAULT_MODEL,
        system_instruction: str | None = None,
        history: list[genai_types.Content] | None = None,
        config: genai_types.GenerateContentConfig | None = None,
        policy: RetryPolicy | None = None,
    ) -> None:
        """Initialize a chat session.

        Args:
            client: The ``google-genai`` client.
            model: Model identifier.
            system_instruction: Optional system instruction for every turn.
            history: Earlier turns to continue from.
            config: Extra request config; ``system_instruction`` overrides
                its own field when both are given.
            policy: Retry policy.
        """
        self._client = client
        self._model = model
        self._history: list[genai_types.Content] = list(history or [])
        self._policy = policy
        config = config.model_copy() if config else genai_types.GenerateContentConfig()
        if system_instruction is not None:
            config.system_instruction = system_instruction
        self._config = config
        self.usage = Usage()

    @property
    def model(self) -> str:
        return self._model

    @property
    def history(self) -> list[genai_types.Content]:
        """A copy of the conversation so far."""
        return list(self._history)

    def reset(self) -> None:
        """Forget the conversation."""
        self._history.clear()
        self.usage = Usage()

    def _add_usage(self, usage: Usage) -> None:
        self.usage = Usage(**{k: getattr(self.usage, k) + v for k, v in usage.model_dump().items()})

    async def send(self, message: str) -> str:
        """Send a user message and return the model's reply."""
        turn = user_content(message)
        response = await generate_content(
            self._client,
            model=self._model,
            contents=[*self._history, turn],
            config=self._config,
            policy=self._policy,
        )
        reply = response_text(response)
        self._history.append(turn)
        self._history.append(model_turn(response))
        self._add_usage(usage_from_response(response))
        await logger.adebug('chat turn', turns=len(self._history) // 2, reply_length=len(reply))
        return reply

    async def send_stream(self, message: str) -> AsyncIterator[str]:
        """Send a user message and yield the reply as it streams in.

        The turn is committed to the history after the last chunk.
        """
        turn = user_content(message)
        chunks: list[str] = []
        last_usage: Usage | None = None
        async for chunk in generate_content_stream(
            self._client,
            model=self._model,
            contents=[*self._history, turn],
            config=self._config,
            policy=self._policy,
        ):
            if chunk.usage_metadata is not None and chunk.usage_metadata.total_token_count:
                last_usage = usage_from_response(chunk)
            if not chunk.candidates:
                continue
            text = response_text(chunk)
            if text:
                chunks.append(text)
                yield text
        self._history.append(turn)
        self._history.append(model_content(''.join(chunks)))
        if last_usage is not None:
            self._add_usage(last_usage)
