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

"""Image, document, audio and video understanding, plus image generation.

Media reaches the model in one of three ways::

    source                         part
    ─────────────────────────────  ───────────────────────────────────
    file/bytes <= 20 MiB       ──► inline_data (Part.from_bytes)
    file/bytes  > 20 MiB       ──► Files API upload ──► file_data
    YouTube / Files API URL    ──► file_data (resolved by the service)
    any other http(s) URL      ──► downloaded, then as file/bytes above

Uploaded files are polled until the service reports them ``ACTIVE``;
videos in particular spend some time ``PROCESSING``.
"""

import asyncio
import io
import mimetypes
import time
from pathlib import Path
from urllib.parse import urlparse

import httpx
import structlog
from google import genai
from google.genai import types as genai_types

from genai_guide.constants import DEFAULT_IMAGE_MODEL, DEFAULT_MODEL, INLINE_LIMIT_BYTES
from genai_guide.errors import GuideError, from_exception
from genai_guide.generate import (
    finish_reason,
    generate_content,
    response_parts,
    response_text,
    usage_from_response,
)
from genai_guide.retry import RetryPolicy, with_retries
from genai_guide.types import GeneratedImage, ImageResult, TextResult

logger = structlog.get_logger(__name__)

MediaSource = str | Path | bytes

_NATIVE_HOSTS = frozenset({
    'youtube.com',
    'www.youtube.com',
    'm.youtube.com',
    'youtu.be',
    'generativelanguage.googleapis.com',
})

# mimetypes misses or disagrees on a few formats the API accepts.
_EXTRA_MIME_TYPES = {
    '.aac': 'audio/aac',
    '.aiff': 'audio/aiff',
    '.flac': 'audio/flac',
    '.m4a': 'audio/mp4',
    '.mp3': 'audio/mp3',
    '.ogg': 'audio/ogg',
    '.wav': 'audio/wav',
    '.webp': 'image/webp',
    '.heic': 'image/heic',
    '.heif': 'image/heif',
    '.mov': 'video/mov',
    '.webm': 'video/webm',
    '.3gp': 'video/3gpp',
}


def guess_mime_type(path: str | Path) -> str | None:
    """Guess the mime type of a file or URL path from its extension."""
    suffix = Path(urlparse(str(path)).path).suffix.lower()
    if suffix in _EXTRA_MIME_TYPES:
        return _EXTRA_MIME_TYPES[suffix]
    mime_type, _ = mimetypes.guess_type(f'file{suffix}')
    return mime_type


def is_gemini_native_url(url: str) -> bool:
    """Whether the service resolves ``url`` itself (YouTube, Files API)."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme not in ('http', 'https'):
        return False
    return (parsed.hostname or '') in _NATIVE_HOSTS


def _is_http_url(value: str) -> bool:
    return value.startswith(('http://', 'https://'))


def _state(file: genai_types.File) -> str:
    state = file.state
    return getattr(state, 'value', None) or str(state or 'STATE_UNSPECIFIED')


async def wait_until_active(
    client: genai.Client,
    file: genai_types.File,
    *,
    poll_interval: float = 2.0,
    timeout: float = 300.0,
) -> genai_types.File:
    """Poll an uploaded file until it is ready to be referenced in a prompt.

    Raises:
        GuideError: ``FAILED_PRECONDITION`` if processing failed,
            ``DEADLINE_EXCEEDED`` if it is still processing after ``timeout``.
    """
    deadline = time.monotonic() + timeout
    while _state(file) == 'PROCESSING':
        if time.monotonic() >= deadline:
            raise GuideError(
                message=f'file {file.name} still processing after {timeout}s',
                status='DEADLINE_EXCEEDED',
            )
        await logger.adebug('waiting for file', name=file.name, state=_state(file))
        await asyncio.sleep(poll_interval)
        file = await client.aio.files.get(name=file.name)

    if _state(file) == 'FAILED':
        message = file.error.message if file.error and file.error.message else 'processing failed'
        raise GuideError(message=f'file {file.name}: {message}', status='FAILED_PRECONDITION')
    return file


async def upload_file(
    client: genai.Client,
    source: str | Path | bytes,
    mime_type: str | None = None,
    *,
    display_name: str | None = None,
    policy: RetryPolicy | None = None,
    poll_interval: float = 2.0,
    timeout: float = 300.0,
) -> genai_types.File:
    """Upload a file through the Files API and wait until it is active.

    Args:
        client: The ``google-genai`` client.
        source: A path, or raw bytes (``mime_type`` is then required).
        mime_type: Mime type; guessed from the path when omitted.
        display_name: Optional human readable name.
        policy: Retry policy for the upload call.
        poll_interval: Seconds between state checks.
        timeout: Seconds to wait for processing.

    Returns:
        The active file handle.
    """
    if isinstance(source, bytes):
        if not mime_type:
            raise GuideError(message='mime_type is required when uploading raw bytes', status='INVALID_ARGUMENT')
        data = source

        def upload():
            return client.aio.files.upload(
                file=io.BytesIO(data),
                config=genai_types.UploadFileConfig(mime_type=mime_type, display_name=display_name),
            )
    else:
        path = Path(source)
        mime_type = mime_type or guess_mime_type(path)

        def upload():
            return client.aio.files.upload(
                file=str(path),
                config=genai_types.UploadFileConfig(mime_type=mime_type, display_name=display_name),
            )

    file = await with_retries(upload, policy)
    await logger.ainfo('uploaded file', name=file.name, mime_type=file.mime_type, state=_state(file))
    return await wait_until_active(client, file, poll_interval=poll_interval, timeout=timeout)


async def _download(url: str, http_client: httpx.AsyncClient | None) -> tuple[bytes, str | None]:
    owned = http_client is None
    http = http_client or httpx.AsyncClient(follow_redirects=True, timeout=60.0)
    try:
        response = await http.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise GuideError(
            message=f'failed to download {url}: HTTP {e.response.status_code}',
            http_code=e.response.status_code,
            status='NOT_FOUND' if e.response.status_code == 404 else 'INVALID_ARGUMENT',
            cause=e,
        ) from e
    except httpx.TransportError as e:
        raise from_exception(e) from e
    finally:
        if owned:
            await http.aclose()
    content_type = response.headers.get('content-type')
    mime_type = content_type.split(';')[0].strip() if content_type else None
    return response.content, mime_type


async def media_part(
    client: genai.Client,
    source: MediaSource,
    mime_type: str | None = None,
    *,
    policy: RetryPolicy | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> genai_types.Part:
    """Turn a path, bytes or URL into a part the model can read.

    Raises:
        GuideError: ``INVALID_ARGUMENT`` when the mime type cannot be determined.
    """
    if isinstance(source, str) and _is_http_url(source):
        if is_gemini_native_url(source):
            return genai_types.Part(file_data=genai_types.FileData(file_uri=source, mime_type=mime_type))
        data, served_type = await _download(source, http_client)
        return await media_part(client, data, mime_type or served_type or guess_mime_type(source), policy=policy)

    if isinstance(source, bytes):
        if not mime_type:
            raise GuideError(message='mime_type is required for raw bytes', status='INVALID_ARGUMENT')
        if len(source) <= INLINE_LIMIT_BYTES:
            return genai_types.Part.from_bytes(data=source, mime_type=mime_type)
        file = await upload_file(client, source, mime_type, policy=policy)
        return genai_types.Part.from_uri(file_uri=file.uri, mime_type=file.mime_type or mime_type)

    path = Path(source)
    mime_type = mime_type or guess_mime_type(path)
    if not mime_type:
        raise GuideError(message=f'cannot determine the mime type of {path}', status='INVALID_ARGUMENT')
    if path.stat().st_size <= INLINE_LIMIT_BYTES:
        return genai_types.Part.from_bytes(data=path.read_bytes(), mime_type=mime_type)
    file = await upload_file(client, path, mime_type, policy=policy)
    return genai_types.Part.from_uri(file_uri=file.uri, mime_type=file.mime_type or mime_type)


async def _ask_about_media(
    client: genai.Client,
    source: MediaSource,
    prompt: str,
    *,
    model: str,
    mime_type: str | None,
    policy: RetryPolicy | None,
    http_client: httpx.AsyncClient | None = None,
) -> TextResult:
    part = await media_part(client, source, mime_type, policy=policy, http_client=http_client)
    response = await generate_content(client, model=model, contents=[part, prompt], policy=policy)
    return TextResult(
        text=response_text(response),
        usage=usage_from_response(response),
        finish_reason=finish_reason(response),
    )


async def describe_image(
    client: genai.Client,
    source: MediaSource,
    prompt: str = 'Describe this image in detail.',
    *,
    model: str = DEFAULT_MODEL,
    mime_type: str | None = None,
    policy: RetryPolicy | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> TextResult:
    """Ask a question about an image."""
    return await _ask_about_media(
        client, source, prompt, model=model, mime_type=mime_type, policy=policy, http_client=http_client
    )


async def understand_document(
    client: genai.Client,
    source: MediaSource,
    prompt: str = 'Summarize this document.',
    *,
    model: str = DEFAULT_MODEL,
    mime_type: str | None = 'application/pdf',
    policy: RetryPolicy | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> TextResult:
    """Ask a question about a document, PDF by default."""
    return await _ask_about_media(
        client, source, prompt, model=model, mime_type=mime_type, policy=policy, http_client=http_client
    )


async def transcribe_audio(
    client: genai.Client,
    source: MediaSource,
    prompt: str = 'Generate a transcript of the speech.',
    *,
    model: str = DEFAULT_MODEL,
    mime_type: str | None = None,
    policy: RetryPolicy | None = None,
) -> TextResult:
    """Transcribe, or otherwise describe, an audio clip."""
    return await _ask_about_media(client, source, prompt, model=model, mime_type=mime_type, policy=policy)


async def understand_video(
    client: genai.Client,
    source: MediaSource,
    prompt: str = 'Summarize this video. Then create a quiz with an answer key based on the information in it.',
    *,
    model: str = DEFAULT_MODEL,
    mime_type: str | None = None,
    policy: RetryPolicy | None = None,
) -> TextResult:
    """Ask a question about a local video file or a YouTube URL."""
    return await _ask_about_media(client, source, prompt, model=model, mime_type=mime_type, policy=policy)


async def generate_image(
    client: genai.Client,
    prompt: str,
    *,
    model: str = DEFAULT_IMAGE_MODEL,
    policy: RetryPolicy | None = None,
) -> ImageResult:
    """Generate images (and accompanying text) from a prompt."""
    config = genai_types.GenerateContentConfig(response_modalities=['TEXT', 'IMAGE'])
    response = await generate_content(client, model=model, contents=prompt, config=config, policy=policy)

    text: list[str] = []
    images: list[GeneratedImage] = []
    for part in response_parts(response):
        if part.text and not part.thought:
            text.append(part.text)
        elif part.inline_data is not None and part.inline_data.data:
            images.append(
                GeneratedImage(
                    mime_type=part.inline_data.mime_type or 'image/png',
                    data=part.inline_data.data,
                )
            )
    if not images:
        await logger.awarning('model returned no image', model=model)
    return ImageResult(text=''.join(text), images=images, usage=usage_from_response(response))
