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

"""Result types returned by the guide's operations."""

import sys  # noqa

if sys.version_info < (3, 11):  # noqa
    from strenum import StrEnum  # noqa
else:  # noqa
    from enum import StrEnum  # noqa

import mimetypes
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class Usage(BaseModel):
    """Token accounting reported by the service."""

    input_tokens: int = 0
    output_tokens: int = 0
    thoughts_tokens: int = 0
    cached_tokens: int = 0
    tool_use_prompt_tokens: int = 0
    total_tokens: int = 0


class TextResult(BaseModel):
    """A text answer and what it cost."""

    text: str
    usage: Usage = Field(default_factory=Usage)
    finish_reason: str | None = None


class GeneratedImage(BaseModel):
    """An image returned inline by the model."""

    mime_type: str
    data: bytes

    def extension(self) -> str:
        return mimetypes.guess_extension(self.mime_type) or '.bin'


class ImageResult(BaseModel):
    """Text and images produced by an image-capable model."""

    text: str = ''
    images: list[GeneratedImage] = Field(default_factory=list)
    usage: Usage = Field(default_factory=Usage)

    def save(self, directory: str | Path, stem: str = 'image') -> list[Path]:
        """Write every image to ``directory`` and return the written paths."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        paths = []
        for i, image in enumerate(self.images):
            path = directory / f'{stem}-{i}{image.extension()}'
            path.write_bytes(image.data)
            paths.append(path)
        return paths


class ThinkingLevel(StrEnum):
    """Coarse reasoning effort, an alternative to a token budget."""

    MINIMAL = 'MINIMAL'
    LOW = 'LOW'
    MEDIUM = 'MEDIUM'
    HIGH = 'HIGH'


class ThinkingResult(BaseModel):
    """An answer with the model's thought summaries kept apart."""

    answer: str
    thoughts: list[str] = Field(default_factory=list)
    thoughts_token_count: int = 0
    usage: Usage = Field(default_factory=Usage)


class ToolCallRecord(BaseModel):
    """One function call requested by the model and what it returned."""

    name: str
    args: dict[str, Any] = Field(default_factory=dict)
    response: dict[str, Any] = Field(default_factory=dict)


class ToolRunResult(BaseModel):
    """Final answer of a function-calling exchange."""

    text: str
    calls: list[ToolCallRecord] = Field(default_factory=list)
    turns: int = 0


class UrlRetrieval(BaseModel):
    """Whether the service managed to fetch a URL named in the prompt."""

    url: str
    status: str


class UrlContextResult(BaseModel):
    text: str
    urls: list[UrlRetrieval] = Field(default_factory=list)
    usage: Usage = Field(default_factory=Usage)


class Source(BaseModel):
    """A web page the answer was grounded on."""

    title: str | None = None
    uri: str


class GroundingSupport(BaseModel):
    """A span of the answer and the sources backing it."""

    start_index: int = 0
    end_index: int
    text: str | None = None
    source_indices: list[int] = Field(default_factory=list)


class GroundedAnswer(BaseModel):
    """An answer grounded on live search results."""

    text: str
    queries: list[str] = Field(default_factory=list)
    sources: list[Source] = Field(default_factory=list)
    supports: list[GroundingSupport] = Field(default_factory=list)
    search_entry_point: str | None = None


class CodeStep(BaseModel):
    """Code the model wrote and the result of running it server-side."""

    language: str = 'PYTHON'
    code: str
    outcome: str | None = None
    output: str | None = None


class CodeExecutionResult(BaseModel):
    text: str
    steps: list[CodeStep] = Field(default_factory=list)
    usage: Usage = Field(default_factory=Usage)
