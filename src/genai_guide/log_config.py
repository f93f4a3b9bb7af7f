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

"""Logging setup for the guide and its CLI.

Configures Rich tracebacks and structlog + stdlib logging. Two modes:

- **console** (default) -- colored, human-readable output.
- **json** -- one JSON object per line, for log aggregators.

The format comes from the ``log_format`` argument, falling back to the
``LOG_FORMAT`` environment variable::

    LOG_FORMAT=json genai-guide text "hello"

Usage::

    from genai_guide.log_config import setup_logging

    setup_logging()  # Call once at startup.
"""

import logging
import os
import re
import sys

import structlog
import structlog.types
from rich.traceback import install as _install_rich_traceback

_SECRET_PATTERN = re.compile(r'(?i)(api[_-]?key|token|secret|password|authorization|credential)')
_SECRET_FIELD_NAMES: frozenset[str] = frozenset({
    'api_key',
    'apikey',
    'gemini_api_key',
    'google_api_key',
    'token',
    'access_token',
    'secret',
    'password',
    'authorization',
    'credentials',
})


def _mask_value(value: str) -> str:
    """Mask a secret value, keeping the first 4 and last 2 characters."""
    if len(value) <= 8:
        return '****'
    return f'{value[:4]}{"*" * (len(value) - 6)}{value[-2:]}'


def _redact_secrets(
    _logger: structlog.types.WrappedLogger,
    _method: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Structlog processor that masks secret-looking string values."""
    for key in list(event_dict.keys()):
        if key == 'event' or not isinstance(event_dict[key], str):
            continue
        lower_key = key.lower().replace('-', '_')
        if lower_key in _SECRET_FIELD_NAMES or _SECRET_PATTERN.search(lower_key):
            event_dict[key] = _mask_value(event_dict[key])
    return event_dict


def _want_json(log_format: str | None) -> bool:
    if log_format is None:
        log_format = os.environ.get('LOG_FORMAT', '')
    return log_format.lower() == 'json'


def _want_colors() -> bool:
    """Color is enabled unless suppressed via ``NO_COLOR`` (https://no-color.org)."""
    return not os.environ.get('NO_COLOR', '')


def setup_logging(log_level: int | str = logging.INFO, log_format: str | None = None) -> None:
    """Configure structlog and stdlib logging.

    Both structlog loggers (used by this package) and stdlib loggers (used
    by ``google-genai`` and ``httpx``) render through the same
    ``ProcessorFormatter``, so every line has the same shape.

    Args:
        log_level: Minimum level, either a ``logging`` constant or a name
            such as ``'debug'``.
        log_format: ``'json'`` or ``'console'``. Defaults to ``LOG_FORMAT``.
    """
    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO

    use_json = _want_json(log_format)

    if not use_json:
        _install_rich_traceback(show_locals=False, width=120, extra_lines=3)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _redact_secrets,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt='iso'),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if use_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=_want_colors())

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    # Logs go to stderr so command output on stdout stays pipeable.
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for noisy_logger in ('httpx', 'httpcore', 'google_genai.models'):
        logging.getLogger(noisy_logger).setLevel(max(log_level, logging.WARNING))
