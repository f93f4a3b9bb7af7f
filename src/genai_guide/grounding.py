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

"""URL context and Google Search grounding.

Both are server-side tools: the service fetches the pages or runs the
searches, and reports what it used in the candidate's metadata.

Grounding supports point into the answer with **byte** offsets of its
UTF-8 encoding, so :func:`add_citations` edits the encoded text.
"""

from google import genai
from google.genai import types as genai_types

from genai_guide.constants import DEFAULT_MODEL
from genai_guide.generate import (
    enum_value,
    first_candidate,
    generate_content,
    response_text,
    usage_from_response,
)
from genai_guide.retry import RetryPolicy
from genai_guide.types import GroundedAnswer, GroundingSupport, Source, UrlContextResult, UrlRetrieval


async def fetch_url_context(
    client: genai.Client,
    prompt: str,
    *,
    model: str = DEFAULT_MODEL,
    policy: RetryPolicy | None = None,
) -> UrlContextResult:
    """Answer a prompt that names URLs, letting the service fetch them.

    Returns:
        The answer and the retrieval status of each URL the service tried.
    """
    config = genai_types.GenerateContentConfig(tools=[genai_types.Tool(url_context=genai_types.UrlContext())])
    response = await generate_content(client, model=model, contents=prompt, config=config, policy=policy)

    urls: list[UrlRetrieval] = []
    metadata = first_candidate(response).url_context_metadata
    if metadata is not None and metadata.url_metadata:
        for entry in metadata.url_metadata:
            urls.append(
                UrlRetrieval(
                    url=entry.retrieved_url or '',
                    status=enum_value(entry.url_retrieval_status) or 'UNKNOWN',
                )
            )
    return UrlContextResult(text=response_text(response), urls=urls, usage=usage_from_response(response))


async def search_grounded(
    client: genai.Client,
    query: str,
    *,
    model: str = DEFAULT_MODEL,
    policy: RetryPolicy | None = None,
) -> GroundedAnswer:
    """Answer ``query`` grounded on live Google Search results."""
    config = genai_types.GenerateContentConfig(tools=[genai_types.Tool(google_search=genai_types.GoogleSearch())])
    response = await generate_content(client, model=model, contents=query, config=config, policy=policy)

    answer = GroundedAnswer(text=response_text(response))
    metadata = first_candidate(response).grounding_metadata
    if metadata is None:
        return answer

    answer.queries = list(metadata.web_search_queries or [])
    for chunk in metadata.grounding_chunks or []:
        if chunk.web is not None and chunk.web.uri:
            answer.sources.append(Source(title=chunk.web.title, uri=chunk.web.uri))
        else:
            # Keep indices aligned with grounding_chunk_indices.
            answer.sources.append(Source(title=None, uri=''))
    for support in metadata.grounding_supports or []:
        segment = support.segment
        if segment is None or segment.end_index is None:
            continue
        answer.supports.append(
            GroundingSupport(
                start_index=segment.start_index or 0,
                end_index=segment.end_index,
                text=segment.text,
                source_indices=list(support.grounding_chunk_indices or []),
            )
        )
    if metadata.search_entry_point is not None:
        answer.search_entry_point = metadata.search_entry_point.rendered_content
    return answer


def add_citations(answer: GroundedAnswer) -> str:
    """Insert ``[n](uri)`` links after each grounded segment of the answer.

    Supports ending at the same offset share one group of links, in the
    order they are listed. Groups are applied from the highest offset
    down, so inserting one never shifts the offsets of those still to be
    applied.
    """
    encoded = answer.text.encode('utf-8')
    links_at: dict[int, list[str]] = {}
    for support in answer.supports:
        links = links_at.setdefault(min(support.end_index, len(encoded)), [])
        for i in support.source_indices:
            if not (0 <= i < len(answer.sources) and answer.sources[i].uri):
                continue
            link = f'[{i + 1}]({answer.sources[i].uri})'
            if link not in links:
                links.append(link)
    for end in sorted(links_at, reverse=True):
        if links_at[end]:
            encoded = encoded[:end] + (' ' + ', '.join(links_at[end])).encode('utf-8') + encoded[end:]
    return encoded.decode('utf-8')
