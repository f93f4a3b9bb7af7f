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

"""Function calling: declare Python functions as tools and run the exchange.

The model never executes anything itself. It answers with one or more
``function_call`` parts; the caller runs the matching functions and sends
``function_response`` parts back, until the model answers in text::

    user prompt ──► model ──► function_call(s) ──► ToolRegistry.call
                      ▲                                   │
                      └──────── function_response(s) ◄────┘

Usage::

    registry = ToolRegistry()

    @registry.register
    def get_weather(input_: WeatherInput) -> dict:
        \"\"\"Get the current weather for a location.\"\"\"
        ...

    result = await run_with_tools(client, "What's the weather in Paris?", registry)
"""

import asyncio
import inspect
import typing
from collections.abc import Callable
from typing import Any

import structlog
from google import genai
from google.genai import types as genai_types
from pydantic import BaseModel, ValidationError, create_model

from genai_guide.constants import DEFAULT_MODEL
from genai_guide.errors import GuideError
from genai_guide.generate import generate_content, model_turn, response_parts, response_text
from genai_guide.retry import RetryPolicy
from genai_guide.schema import to_gemini_schema
from genai_guide.types import ToolCallRecord, ToolRunResult

logger = structlog.get_logger(__name__)


class Tool:
    """A registered Python function and its declaration."""

    def __init__(self, fn: Callable[..., Any], name: str | None = None, description: str | None = None) -> None:
        self.fn = fn
        self.name = name or fn.__name__
        doc = inspect.getdoc(fn) or ''
        self.description = description or doc.split('\n\n')[0].strip()

        hints = typing.get_type_hints(fn)
        params = [p for p in inspect.signature(fn).parameters.values() if p.name not in ('self', 'cls')]
        if len(params) == 1 and isinstance(hints.get(params[0].name), type) and issubclass(
            hints[params[0].name], BaseModel
        ):
            self._input_model: type[BaseModel] = hints[params[0].name]
            self._takes_model = True
        else:
            fields: dict[str, Any] = {}
            for p in params:
                default = ... if p.default is inspect.Parameter.empty else p.default
                fields[p.name] = (hints.get(p.name, Any), default)
            self._input_model = create_model(f'{self.name}_input', **fields)
            self._takes_model = False

    def declaration(self) -> genai_types.FunctionDeclaration:
        """The declaration sent to the model."""
        parameters = None
        if self._input_model.model_fields:
            parameters = to_gemini_schema(self._input_model.model_json_schema())
        return genai_types.FunctionDeclaration(name=self.name, description=self.description, parameters=parameters)

    async def run(self, args: dict[str, Any] | None) -> Any:
        """Validate ``args`` and run the function, awaiting it if needed."""
        validated = self._input_model.model_validate(args or {})
        if self._takes_model:
            result = self.fn(validated)
        else:
            result = self.fn(**{name: getattr(validated, name) for name in self._input_model.model_fields})
        if inspect.isawaitable(result):
            result = await result
        return result


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode='json')
    return value


class ToolRegistry:
    """Named tools the model may call."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(
        self,
        fn: Callable[..., Any] | None = None,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> Any:
        """Register a function; usable as ``@register`` or ``@register(name=...)``."""

        def wrapper(func: Callable[..., Any]) -> Callable[..., Any]:
            tool = Tool(func, name=name, description=description)
            if tool.name in self._tools:
                raise ValueError(f'tool {tool.name!r} is already registered')
            self._tools[tool.name] = tool
            return func

        if fn is not None:
            return wrapper(fn)
        return wrapper

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def names(self) -> list[str]:
        return list(self._tools)

    def declarations(self) -> list[genai_types.FunctionDeclaration]:
        return [tool.declaration() for tool in self._tools.values()]

    def as_tool(self) -> genai_types.Tool:
        """All declarations bundled as one ``Tool`` for the request config."""
        return genai_types.Tool(function_declarations=self.declarations())

    async def call(self, call: genai_types.FunctionCall) -> tuple[genai_types.Part, ToolCallRecord]:
        """Run the function the model asked for.

        Failures are reported back to the model as an ``error`` response
        instead of raised, so it can correct its arguments or answer anyway.

        Returns:
            The ``function_response`` part and a record of the call.
        """
        name = call.name or ''
        args = dict(call.args or {})
        tool = self._tools.get(name)
        if tool is None:
            response: dict[str, Any] = {'error': f'unknown tool: {name}'}
        else:
            try:
                response = {'output': _jsonable(await tool.run(args))}
            except ValidationError as e:
                response = {'error': f'invalid arguments: {e}'}
            except Exception as e:
                await logger.aexception('tool failed', tool=name)
                response = {'error': f'{type(e).__name__}: {e}'}

        await logger.ainfo('tool called', tool=name, args=args, ok='error' not in response)
        part = genai_types.Part(
            function_response=genai_types.FunctionResponse(id=call.id, name=name, response=response),
        )
        return part, ToolCallRecord(name=name, args=args, response=response)


async def run_with_tools(
    client: genai.Client,
    prompt: str,
    registry: ToolRegistry,
    *,
    model: str = DEFAULT_MODEL,
    system_instruction: str | None = None,
    max_turns: int = 5,
    policy: RetryPolicy | None = None,
) -> ToolRunResult:
    """Answer ``prompt``, running tools the model asks for along the way.

    Args:
        client: The ``google-genai`` client.
        prompt: The user prompt.
        registry: Tools the model may call.
        model: Model identifier.
        system_instruction: Optional system instruction.
        max_turns: Model calls allowed before giving up.
        policy: Retry policy.

    Returns:
        The final text answer and every tool call made.

    Raises:
        GuideError: ``ABORTED`` if the model still calls tools after ``max_turns``.
    """
    config = genai_types.GenerateContentConfig(
        tools=[registry.as_tool()],
        system_instruction=system_instruction,
        automatic_function_calling=genai_types.AutomaticFunctionCallingConfig(disable=True),
    )
    contents: list[genai_types.Content] = [
        genai_types.Content(role='user', parts=[genai_types.Part(text=prompt)]),
    ]
    records: list[ToolCallRecord] = []

    for turn in range(1, max_turns + 1):
        response = await generate_content(client, model=model, contents=contents, config=config, policy=policy)
        calls = [part.function_call for part in response_parts(response) if part.function_call]
        if not calls:
            return ToolRunResult(text=response_text(response), calls=records, turns=turn)

        # The model turn is sent back verbatim; it carries thought signatures.
        contents.append(model_turn(response))
        results = await asyncio.gather(*(registry.call(c) for c in calls))
        contents.append(genai_types.Content(role='user', parts=[part for part, _ in results]))
        records.extend(record for _, record in results)

    raise GuideError(
        message=f'model still requesting tools after {max_turns} turns',
        status='ABORTED',
        details={'calls': [r.model_dump() for r in records]},
    )
