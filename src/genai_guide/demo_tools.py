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

"""Example tools for the function-calling walkthrough."""

import operator

from pydantic import BaseModel, Field

from genai_guide.tools import ToolRegistry


class WeatherInput(BaseModel):
    """Input for getting weather."""

    location: str = Field(description='The city and state, e.g. San Francisco, CA')


class CalculatorInput(BaseModel):
    """Input for the calculator tool."""

    operation: str = Field(description='Math operation: add, subtract, multiply, divide')
    a: float = Field(description='First number')
    b: float = Field(description='Second number')


class CurrencyExchangeInput(BaseModel):
    """Currency conversion input schema."""

    amount: float = Field(description='Amount to convert')
    from_currency: str = Field(description='Source currency code (e.g., USD)')
    to_currency: str = Field(description='Target currency code (e.g., EUR)')


# Fixed readings so answers are reproducible.
_WEATHER = {
    'paris': {'temperature_celsius': 18.5, 'conditions': 'cloudy'},
    'london': {'temperature_celsius': 14.0, 'conditions': 'rain'},
    'tokyo': {'temperature_celsius': 24.0, 'conditions': 'sunny'},
}

_RATES = {
    ('USD', 'EUR'): 0.85,
    ('EUR', 'USD'): 1.18,
    ('USD', 'GBP'): 0.73,
    ('GBP', 'USD'): 1.37,
}


def get_weather(input_: WeatherInput) -> dict:
    """Get the current weather for a location."""
    city = input_.location.split(',')[0].strip().lower()
    reading = _WEATHER.get(city, {'temperature_celsius': 21.5, 'conditions': 'clear'})
    return {'location': input_.location, **reading}


def calculate(input_: CalculatorInput) -> dict:
    """Perform basic arithmetic operations.

    Unknown operations and division by zero come back as an ``error``
    entry for the model to read.
    """
    operations = {
        'add': operator.add,
        'subtract': operator.sub,
        'multiply': operator.mul,
        'divide': operator.truediv,
    }
    op_name = input_.operation.lower()
    handler = operations.get(op_name)
    if not handler:
        return {'error': f'Unknown operation: {op_name}'}
    try:
        result = handler(input_.a, input_.b)
    except ZeroDivisionError:
        return {'error': 'Division by zero'}
    return {'operation': op_name, 'a': input_.a, 'b': input_.b, 'result': result}


def convert_currency(input_: CurrencyExchangeInput) -> dict:
    """Convert an amount between currencies."""
    pair = (input_.from_currency.upper(), input_.to_currency.upper())
    if pair[0] == pair[1]:
        rate = 1.0
    elif pair in _RATES:
        rate = _RATES[pair]
    else:
        return {'error': f'No exchange rate for {pair[0]} -> {pair[1]}'}
    return {'amount': input_.amount, 'converted': round(input_.amount * rate, 2), 'currency': pair[1]}


def celsius_to_fahrenheit(celsius: float) -> float:
    """Converts Celsius to Fahrenheit."""
    return (celsius * 9) / 5 + 32


def demo_registry() -> ToolRegistry:
    """A registry holding every example tool."""
    registry = ToolRegistry()
    registry.register(get_weather, name='getWeather')
    registry.register(calculate)
    registry.register(convert_currency, name='convertCurrency')
    registry.register(celsius_to_fahrenheit, name='celsiusToFahrenheit')
    return registry
