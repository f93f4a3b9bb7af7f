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

"""Command line entry point: one subcommand per section of the guide.

| Command          | Section                         |
|------------------|---------------------------------|
| `text`           | Text generation                 |
| `stream`         | Streaming text generation       |
| `long`           | Long-context input              |
| `image`          | Image understanding             |
| `document`       | Document (PDF) understanding    |
| `audio`          | Audio understanding             |
| `video`          | Video understanding             |
| `generate-image` | Image generation                |
| `json`           | Structured output               |
| `think`          | Reasoning control               |
| `tools`          | Function calling                |
| `url`            | URL context                     |
| `code`           | Code execution                  |
| `search`         | Search grounding                |
| `chat`           | Multi-turn chat                 |

Exit codes: 0 success, 1 API or usage error (with remediation advice on
stderr), 2 missing API key, 130 interrupted.
"""

import argparse
import asyncio
import inspect
import json
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path

import structlog
from google import genai
from rich.console import Console

from genai_guide import chat, code_execution, grounding, media, structured, text, thinking, tools
from genai_guide.client import make_client
from genai_guide.config import Settings, make_settings
from genai_guide.demo_tools import demo_registry
from genai_guide.errors import GuideError
from genai_guide.log_config import setup_logging
from genai_guide.retry import RetryPolicy
from genai_guide.types import ThinkingLevel, Usage

logger = structlog.get_logger(__name__)

stdout = Console(markup=False, highlight=False, soft_wrap=True)
stderr = Console(stderr=True, highlight=False, soft_wrap=True)

Handler = Callable[[genai.Client, argparse.Namespace, Settings, RetryPolicy], Awaitable[None] | None]


def _print_usage(usage: Usage) -> None:
    stderr.print(
        f'[dim]tokens: input={usage.input_tokens} output={usage.output_tokens} '
        f'thoughts={usage.thoughts_tokens} total={usage.total_tokens}[/dim]'
    )


async def _text(client: genai.Client, args: argparse.Namespace, settings: Settings, policy: RetryPolicy) -> None:
    result = await text.generate_text(
        client,
        args.prompt,
        model=settings.model,
        system_instruction=args.system,
        temperature=args.temperature,
        policy=policy,
    )
    stdout.print(result.text)
    _print_usage(result.usage)


async def _stream(client: genai.Client, args: argparse.Namespace, settings: Settings, policy: RetryPolicy) -> None:
    async for chunk in text.stream_text(
        client, args.prompt, model=settings.model, system_instruction=args.system, policy=policy
    ):
        stdout.print(chunk, end='')
    stdout.print()


async def _long(client: genai.Client, args: argparse.Namespace, settings: Settings, policy: RetryPolicy) -> None:
    corpus = text.load_text_files(args.files)
    result = await text.generate_from_long_text(client, corpus, args.question, model=settings.model, policy=policy)
    stdout.print(result.text)
    _print_usage(result.usage)


def _media_handler(operation: Callable[..., Awaitable]) -> Handler:
    async def handler(
        client: genai.Client, args: argparse.Namespace, settings: Settings, policy: RetryPolicy
    ) -> None:
        kwargs = {'model': settings.model, 'policy': policy}
        if args.mime_type:
            kwargs['mime_type'] = args.mime_type
        if args.prompt:
            result = await operation(client, args.source, args.prompt, **kwargs)
        else:
            result = await operation(client, args.source, **kwargs)
        stdout.print(result.text)
        _print_usage(result.usage)

    return handler


async def _generate_image(
    client: genai.Client, args: argparse.Namespace, settings: Settings, policy: RetryPolicy
) -> None:
    result = await media.generate_image(client, args.prompt, model=settings.image_model, policy=policy)
    if result.text:
        stdout.print(result.text)
    for path in result.save(args.out):
        stdout.print(f'saved {path}')


async def _json(client: genai.Client, args: argparse.Namespace, settings: Settings, policy: RetryPolicy) -> None:
    schema = json.loads(Path(args.schema).read_text(encoding='utf-8')) if args.schema else None
    value = await structured.generate_json(client, args.prompt, schema, model=settings.model, policy=policy)
    stdout.print(json.dumps(value, indent=2, ensure_ascii=False))


async def _think(client: genai.Client, args: argparse.Namespace, settings: Settings, policy: RetryPolicy) -> None:
    options = thinking.ThinkingOptions(
        budget=args.budget,
        level=ThinkingLevel(args.level.upper()) if args.level else None,
        include_thoughts=args.show_thoughts,
    )
    result = await thinking.generate_with_thinking(client, args.prompt, options, model=settings.model, policy=policy)
    for thought in result.thoughts:
        stderr.print('[bold]Thought summary:[/bold]')
        stderr.print(thought, markup=False)
    stdout.print(result.answer)
    _print_usage(result.usage)


async def _tools(client: genai.Client, args: argparse.Namespace, settings: Settings, policy: RetryPolicy) -> None:
    result = await tools.run_with_tools(
        client, args.prompt, demo_registry(), model=settings.model, max_turns=args.max_turns, policy=policy
    )
    for call in result.calls:
        line = f'called {call.name}({json.dumps(call.args)}) -> {json.dumps(call.response)}'
        stderr.print(line, style='dim', markup=False)
    stdout.print(result.text)


async def _url(client: genai.Client, args: argparse.Namespace, settings: Settings, policy: RetryPolicy) -> None:
    result = await grounding.fetch_url_context(client, args.prompt, model=settings.model, policy=policy)
    stdout.print(result.text)
    for url in result.urls:
        stderr.print(f'{url.status}: {url.url}', style='dim', markup=False)


async def _code(client: genai.Client, args: argparse.Namespace, settings: Settings, policy: RetryPolicy) -> None:
    result = await code_execution.execute_code(client, args.task, model=settings.model, policy=policy)
    stdout.print(code_execution.format_code_execution(result))


async def _search(client: genai.Client, args: argparse.Namespace, settings: Settings, policy: RetryPolicy) -> None:
    answer = await grounding.search_grounded(client, args.query, model=settings.model, policy=policy)
    stdout.print(grounding.add_citations(answer) if args.citations else answer.text)
    if answer.queries:
        stderr.print(f'search queries: {", ".join(answer.queries)}', style='dim', markup=False)
    for i, source in enumerate(answer.sources, start=1):
        if source.uri:
            stderr.print(f'[{i}] {source.title or ""} {source.uri}', style='dim', markup=False)


async def _send(session: chat.ChatSession, message: str) -> None:
    try:
        async for chunk in session.send_stream(message):
            stdout.print(chunk, end='')
        stdout.print()
    except GuideError as e:
        # The turn was not committed; the conversation can go on.
        _report(e)


def _chat(client: genai.Client, args: argparse.Namespace, settings: Settings, policy: RetryPolicy) -> None:
    """Interactive loop; input is read on the main thread so Ctrl-C interrupts it."""
    session = chat.ChatSession(client, model=settings.model, system_instruction=args.system, policy=policy)
    stderr.print('[dim]Type /reset to start over, /exit or Ctrl-D to quit.[/dim]')
    loop = asyncio.new_event_loop()
    try:
        while True:
            try:
                message = input('you> ')
            except EOFError:
                break
            message = message.strip()
            if not message:
                continue
            if message == '/exit':
                break
            if message == '/reset':
                session.reset()
                continue
            loop.run_until_complete(_send(session, message))
        _print_usage(session.usage)
    finally:
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.close()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(prog='genai-guide', description='Runnable guide to the Gemini API.')
    parser.add_argument('--env', default=None, metavar='ENV', help='Load .<ENV>.env on top of .env')
    parser.add_argument('--model', default=None, help='Model override (default from settings: gemini-2.5-flash)')
    parser.add_argument('--api-key', default=None, help='API key (default: $GEMINI_API_KEY)')
    parser.add_argument('--max-retries', type=int, default=None, help='Retries for 429/5xx errors (default: 3)')
    parser.add_argument('--timeout', type=float, default=None, metavar='SECONDS', help='Request timeout')
    parser.add_argument('--log-format', choices=['console', 'json'], default=None)
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')

    sub = parser.add_subparsers(dest='command', required=True, metavar='COMMAND')

    p = sub.add_parser('text', help='Generate text from a prompt')
    p.add_argument('prompt')
    p.add_argument('--system', default=None, help='System instruction')
    p.add_argument('--temperature', type=float, default=None)
    p.set_defaults(handler=_text)

    p = sub.add_parser('stream', help='Stream generated text')
    p.add_argument('prompt')
    p.add_argument('--system', default=None, help='System instruction')
    p.set_defaults(handler=_stream)

    p = sub.add_parser('long', help='Ask a question about large text files')
    p.add_argument('files', nargs='+')
    p.add_argument('--question', '-q', required=True)
    p.set_defaults(handler=_long)

    for name, operation, help_text in (
        ('image', media.describe_image, 'Describe an image (path or URL)'),
        ('document', media.understand_document, 'Ask about a PDF document'),
        ('audio', media.transcribe_audio, 'Transcribe an audio file'),
        ('video', media.understand_video, 'Summarize a video file or YouTube URL'),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument('source')
        p.add_argument('--prompt', '-p', default=None)
        p.add_argument('--mime-type', default=None)
        p.set_defaults(handler=_media_handler(operation))

    p = sub.add_parser('generate-image', help='Generate an image from a prompt')
    p.add_argument('prompt')
    p.add_argument('--out', default='.', help='Directory to write images to')
    p.set_defaults(handler=_generate_image)

    p = sub.add_parser('json', help='Generate JSON output')
    p.add_argument('prompt')
    p.add_argument('--schema', default=None, help='Path to a JSON schema constraining the output')
    p.set_defaults(handler=_json)

    p = sub.add_parser('think', help='Generate with a thinking budget or level')
    p.add_argument('prompt')
    group = p.add_mutually_exclusive_group()
    group.add_argument('--budget', type=int, default=None, help='Thinking tokens; 0 disables, -1 is dynamic')
    group.add_argument('--level', choices=[lvl.value.lower() for lvl in ThinkingLevel], default=None)
    p.add_argument('--show-thoughts', action='store_true', help='Print thought summaries')
    p.set_defaults(handler=_think)

    p = sub.add_parser('tools', help='Answer using the example tools (weather, calculator, currency)')
    p.add_argument('prompt')
    p.add_argument('--max-turns', type=int, default=5)
    p.set_defaults(handler=_tools)

    p = sub.add_parser('url', help='Answer a prompt that references URLs')
    p.add_argument('prompt')
    p.set_defaults(handler=_url)

    p = sub.add_parser('code', help='Let the model write and run code')
    p.add_argument('task', nargs='?', default=code_execution.DEFAULT_CODE_TASK)
    p.set_defaults(handler=_code)

    p = sub.add_parser('search', help='Answer grounded on Google Search')
    p.add_argument('query')
    p.add_argument('--citations', action='store_true', help='Insert citation links into the answer')
    p.set_defaults(handler=_search)

    p = sub.add_parser('chat', help='Interactive multi-turn chat')
    p.add_argument('--system', default=None, help='System instruction')
    p.set_defaults(handler=_chat)

    return parser


def _report(error: GuideError) -> None:
    stderr.print(f'[bold red]error[/bold red] {error.status} (HTTP {error.http_code}): ', end='')
    stderr.print(error.message, markup=False)
    stderr.print(f'[yellow]hint:[/yellow] {error.remediation}')


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return its exit code."""
    args = build_parser().parse_args(argv)
    settings = make_settings(
        args.env,
        model=args.model,
        gemini_api_key=args.api_key,
        max_retries=args.max_retries,
        request_timeout=args.timeout,
        log_format=args.log_format,
        log_level='debug' if args.debug else None,
    )
    setup_logging(log_level=settings.log_level, log_format=settings.log_format)

    try:
        client = make_client(settings)
    except ValueError as e:
        stderr.print(f'[bold red]error[/bold red] {e}')
        return 2

    policy = RetryPolicy.from_settings(settings)
    try:
        if inspect.iscoroutinefunction(args.handler):
            asyncio.run(args.handler(client, args, settings, policy))
        else:
            args.handler(client, args, settings, policy)
    except GuideError as e:
        logger.debug('command failed', command=args.command, status=e.status, exc_info=True)
        _report(e)
        return 1
    except KeyboardInterrupt:
        return 130
    except OSError as e:
        stderr.print(f'[bold red]error[/bold red] {e}', markup=False)
        return 1
    except ValueError as e:
        # Bad input such as a malformed schema file or an invalid thinking budget.
        stderr.print(f'error: {e}', markup=False)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
