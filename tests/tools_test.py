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

"""Tests for function calling."""

from unittest.mock import MagicMock

import pytest
from google.genai import types as genai_types
from pydantic import BaseModel, Field

from genai_guide.errors import GuideError
from genai_guide.tools import ToolRegistry, run_with_tools


class LightInput(BaseModel):
    brightness: int = Field(description='Light level from 0 to 100', ge=0, le=100)
    color_temp: str = Field(description='daylight, cool or warm')


def set_light_values(input_: LightInput) -> dict:
    """Set the brightness and color temperature of a room light.

    The light must already be on.
    """
    return {'brightness': input_.brightness, 'colorTemperature': input_.color_temp}


async def lookup_stock(symbol: str, exchange: str = 'NASDAQ') -> float:
    """Look up a stock price."""
    return 101.5 if symbol == 'GOOG' else 0.0


def explode() -> str:
    """Always fails."""
    raise RuntimeError('kaboom')


def _call(name: str, args: dict | None = None, call_id: str | None = None) -> genai_types.FunctionCall:
    return genai_types.FunctionCall(id=call_id, name=name, args=args)


def test_declaration_from_model_parameter() -> None:
    registry = ToolRegistry()
    registry.register(set_light_values)

    (decl,) = registry.declarations()

    assert decl.name == 'set_light_values'
    assert decl.description == 'Set the brightness and color temperature of a room light.'
    assert decl.parameters.type == genai_types.Type.OBJECT
    assert decl.parameters.required == ['brightness', 'color_temp']
    assert decl.parameters.properties['brightness'].type == genai_types.Type.INTEGER
    assert decl.parameters.properties['brightness'].description == 'Light level from 0 to 100'


def test_declaration_from_plain_parameters() -> None:
    registry = ToolRegistry()
    registry.register(lookup_stock, name='lookupStock', description='Stock prices.')

    (decl,) = registry.declarations()

    assert decl.name == 'lookupStock'
    assert decl.description == 'Stock prices.'
    assert decl.parameters.required == ['symbol']
    assert decl.parameters.properties['exchange'].type == genai_types.Type.STRING


def test_declaration_without_parameters() -> None:
    registry = ToolRegistry()
    registry.register(explode)
    assert registry.declarations()[0].parameters is None


def test_register_as_decorator_and_duplicates() -> None:
    registry = ToolRegistry()

    @registry.register(name='greet')
    def say_hello(name: str) -> str:
        """Say hello."""
        return f'Hello, {name}'

    assert say_hello('Ada') == 'Hello, Ada'
    assert 'greet' in registry
    assert len(registry) == 1
    assert registry.names() == ['greet']
    assert registry.as_tool().function_declarations[0].name == 'greet'

    with pytest.raises(ValueError, match='already registered'):
        registry.register(say_hello, name='greet')


@pytest.mark.asyncio
async def test_call_returns_output() -> None:
    registry = ToolRegistry()
    registry.register(lookup_stock)

    part, record = await registry.call(_call('lookup_stock', {'symbol': 'GOOG'}, call_id='call-1'))

    assert part.function_response.id == 'call-1'
    assert part.function_response.name == 'lookup_stock'
    assert part.function_response.response == {'output': 101.5}
    assert record.args == {'symbol': 'GOOG'}


@pytest.mark.asyncio
async def test_call_reports_errors_to_the_model() -> None:
    """Unknown tools, bad arguments and exceptions become error responses."""
    registry = ToolRegistry()
    registry.register(set_light_values)
    registry.register(explode)

    unknown, _ = await registry.call(_call('nope'))
    invalid, _ = await registry.call(_call('set_light_values', {'brightness': 500, 'color_temp': 'warm'}))
    failed, record = await registry.call(_call('explode'))

    assert unknown.function_response.response == {'error': 'unknown tool: nope'}
    assert invalid.function_response.response['error'].startswith('invalid arguments')
    assert failed.function_response.response == {'error': 'RuntimeError: kaboom'}
    assert record.response == {'error': 'RuntimeError: kaboom'}


@pytest.mark.asyncio
async def test_run_with_tools(client: MagicMock, make_response) -> None:
    registry = ToolRegistry()
    registry.register(set_light_values)
    call = genai_types.Part(
        function_call=_call('set_light_values', {'brightness': 25, 'color_temp': 'warm'}, call_id='c1'),
    )
    client.aio.models.generate_content.side_effect = [
        make_response(call),
        make_response('The lights are now dim and warm.'),
    ]

    result = await run_with_tools(client, 'Turn the lights down to a romantic level', registry)

    assert result.text == 'The lights are now dim and warm.'
    assert result.turns == 2
    assert [c.name for c in result.calls] == ['set_light_values']
    assert result.calls[0].response == {'output': {'brightness': 25, 'colorTemperature': 'warm'}}

    first_kwargs = client.aio.models.generate_content.call_args_list[0].kwargs
    assert first_kwargs['config'].automatic_function_calling.disable is True
    assert first_kwargs['config'].tools[0].function_declarations[0].name == 'set_light_values'

    user, model, tool_results = client.aio.models.generate_content.call_args_list[1].kwargs['contents']
    assert user.parts[0].text == 'Turn the lights down to a romantic level'
    assert model.role == 'model'
    assert model.parts[0].function_call.name == 'set_light_values'
    assert tool_results.role == 'user'
    assert tool_results.parts[0].function_response.id == 'c1'


@pytest.mark.asyncio
async def test_run_with_tools_parallel_calls(client: MagicMock, make_response) -> None:
    registry = ToolRegistry()
    registry.register(lookup_stock)
    calls = [
        genai_types.Part(function_call=_call('lookup_stock', {'symbol': 'GOOG'})),
        genai_types.Part(function_call=_call('lookup_stock', {'symbol': 'XYZ'})),
    ]
    client.aio.models.generate_content.side_effect = [make_response(*calls), make_response('GOOG is 101.5.')]

    result = await run_with_tools(client, 'Prices for GOOG and XYZ?', registry)

    assert [c.response for c in result.calls] == [{'output': 101.5}, {'output': 0.0}]
    tool_results = client.aio.models.generate_content.call_args_list[1].kwargs['contents'][-1]
    assert len(tool_results.parts) == 2


@pytest.mark.asyncio
async def test_run_with_tools_gives_up(client: MagicMock, make_response) -> None:
    registry = ToolRegistry()
    registry.register(lookup_stock)
    client.aio.models.generate_content.return_value = make_response(
        genai_types.Part(function_call=_call('lookup_stock', {'symbol': 'GOOG'})),
    )

    with pytest.raises(GuideError) as exc_info:
        await run_with_tools(client, 'Keep checking GOOG', registry, max_turns=2)

    assert exc_info.value.status == 'ABORTED'
    assert client.aio.models.generate_content.await_count == 2
