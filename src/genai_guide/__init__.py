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

"""genai-guide: runnable recipes for the Gemini API.

Basic usage:
    from genai_guide import make_client, generate_text

    client = make_client()
    result = await generate_text(client, 'Explain how AI works in a few words')
    print(result.text)
"""

from genai_guide.chat import ChatSession
from genai_guide.client import make_client
from genai_guide.code_execution import execute_code, format_code_execution
from genai_guide.config import Settings, make_settings
from genai_guide.errors import ErrorAdvice, GuideError, advice_for, from_exception
from genai_guide.generate import count_tokens, generate_content, generate_content_stream, response_text
from genai_guide.grounding import add_citations, fetch_url_context, search_grounded
from genai_guide.log_config import setup_logging
from genai_guide.media import (
    describe_image,
    generate_image,
    media_part,
    transcribe_audio,
    understand_document,
    understand_video,
    upload_file,
)
from genai_guide.retry import RetryPolicy, with_retries
from genai_guide.schema import to_gemini_schema
from genai_guide.structured import generate_enum, generate_json, generate_structured
from genai_guide.text import generate_from_long_text, generate_text, stream_text
from genai_guide.thinking import ThinkingOptions, generate_with_thinking
from genai_guide.tools import ToolRegistry, run_with_tools

__version__ = '0.1.0'

__all__ = [
    'ChatSession',
    'ErrorAdvice',
    'GuideError',
    'RetryPolicy',
    'Settings',
    'ThinkingOptions',
    'ToolRegistry',
    'add_citations',
    'advice_for',
    'count_tokens',
    'describe_image',
    'execute_code',
    'fetch_url_context',
    'format_code_execution',
    'from_exception',
    'generate_content',
    'generate_content_stream',
    'generate_enum',
    'generate_from_long_text',
    'generate_image',
    'generate_json',
    'generate_structured',
    'generate_text',
    'generate_with_thinking',
    'make_client',
    'make_settings',
    'media_part',
    'response_text',
    'run_with_tools',
    'search_grounded',
    'setup_logging',
    'stream_text',
    'to_gemini_schema',
    'transcribe_audio',
    'understand_document',
    'understand_video',
    'upload_file',
    'with_retries',
]
