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

"""Conversion of JSON schemas into ``google.genai.types.Schema``.

The Gemini API accepts an OpenAPI-style subset of JSON schema. Schemas
produced by pydantic use ``$defs``/``$ref`` for nested models and
``anyOf: [{...}, {"type": "null"}]`` for optional fields; both are
rewritten here into the inline, ``nullable`` form the API expects.
"""

from typing import Any

from google.genai import types as genai_types

from genai_guide.errors import GuideError

_DEFS_PREFIX = '#/$defs/'


def _resolve_ref(ref: str, defs: dict[str, Any]) -> dict[str, Any]:
    name = ref[len(_DEFS_PREFIX) :] if ref.startswith(_DEFS_PREFIX) else ref.split('/')[-1]
    if name not in defs:
        raise GuideError(message=f'Failed to resolve schema for {name}', status='INVALID_ARGUMENT')
    return defs[name]


def to_gemini_schema(
    input_schema: dict[str, Any] | None,
    defs: dict[str, Any] | None = None,
    _seen: frozenset[str] = frozenset(),
) -> genai_types.Schema | None:
    """Sanitize a JSON schema into a Gemini ``Schema``.

    Args:
        input_schema: The JSON schema, e.g. ``Model.model_json_schema()``.
        defs: Definitions used to resolve ``$ref``; read from the root
            schema's ``$defs`` when omitted.

    Returns:
        The converted schema, or ``None`` for an empty/untyped schema.

    Raises:
        GuideError: ``INVALID_ARGUMENT`` for an unresolvable or recursive ``$ref``.
    """
    if not input_schema:
        return None
    if defs is None:
        defs = input_schema.get('$defs', {})

    if '$ref' in input_schema:
        ref = input_schema['$ref']
        if ref in _seen:
            raise GuideError(message=f'Recursive schema reference {ref} is not supported', status='INVALID_ARGUMENT')
        resolved = to_gemini_schema(_resolve_ref(ref, defs), defs, _seen | {ref})
        if resolved is not None and input_schema.get('description'):
            resolved.description = input_schema['description']
        return resolved

    if 'anyOf' in input_schema:
        branches = [b for b in input_schema['anyOf'] if b.get('type') != 'null']
        nullable = len(branches) < len(input_schema['anyOf'])
        if len(branches) == 1:
            schema = to_gemini_schema(branches[0], defs, _seen)
        else:
            converted = [to_gemini_schema(b, defs, _seen) for b in branches]
            schema = genai_types.Schema(any_of=[s for s in converted if s is not None])
        if schema is None:
            return None
        if nullable:
            schema.nullable = True
        if input_schema.get('description'):
            schema.description = input_schema['description']
        return schema

    schema_type = input_schema.get('type')
    if not schema_type:
        return None

    schema = genai_types.Schema()
    if isinstance(schema_type, list):
        non_null = [t for t in schema_type if t != 'null']
        if len(non_null) != len(schema_type):
            schema.nullable = True
        if not non_null:
            return None
        schema_type = non_null[0]

    schema.type = genai_types.Type(schema_type.upper())

    if input_schema.get('description'):
        schema.description = input_schema['description']
    if 'enum' in input_schema:
        schema.enum = [str(v) for v in input_schema['enum']]
    if 'format' in input_schema:
        schema.format = input_schema['format']
    if 'minimum' in input_schema:
        schema.minimum = input_schema['minimum']
    if 'maximum' in input_schema:
        schema.maximum = input_schema['maximum']

    if schema.type == genai_types.Type.ARRAY:
        schema.items = to_gemini_schema(input_schema.get('items'), defs, _seen)
        if 'minItems' in input_schema:
            schema.min_items = input_schema['minItems']
        if 'maxItems' in input_schema:
            schema.max_items = input_schema['maxItems']

    if schema.type == genai_types.Type.OBJECT:
        properties = input_schema.get('properties', {})
        schema.properties = {}
        for key, value in properties.items():
            converted = to_gemini_schema(value, defs, _seen)
            if converted is not None:
                schema.properties[key] = converted
        if schema.properties:
            schema.property_ordering = list(schema.properties)
        if 'required' in input_schema:
            schema.required = input_schema['required']

    return schema
