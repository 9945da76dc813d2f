"""Attaches keywords and summaries to chunks through external text services."""

import asyncio
import inspect
import logging
import re
from typing import Any, Awaitable, Callable, List, Sequence, Union

from .exceptions import EnrichmentFailure
from .models import Chunk

logger = logging.getLogger(__name__)

KeywordFn = Callable[[str], Union[Sequence[str], str, Awaitable[Any]]]
SummaryFn = Callable[[str], Union[str, Awaitable[Any]]]

DEFAULT_MAX_CONCURRENCY = 4

_KEYWORD_SPLIT_RE = re.compile(r"[,;\n]+")


def normalize_keywords(raw: Any) -> List[str]:
    """
    Cleans a keyword result into an ordered list of unique phrases.

    Accepts a list/tuple (non-string items are dropped) or a delimited string.

    Raises:
        TypeError: If the result is neither a string nor a sequence.
    """
    if isinstance(raw, str):
        candidates = _KEYWORD_SPLIT_RE.split(raw)
    elif isinstance(raw, (list, tuple)):
        candidates = [item for item in raw if isinstance(item, str)]
    else:
        raise TypeError(f"Keyword result must be a list of strings, got {type(raw).__name__}")

    keywords = []
    seen = set()
    for candidate in candidates:
        phrase = " ".join(candidate.split()).strip(" -*\"'.")
        if not phrase or phrase.lower() in seen:
            continue
        seen.add(phrase.lower())
        keywords.append(phrase)
    return keywords


def normalize_summary(raw: Any) -> str:
    """Raises TypeError when the summary service did not return text."""
    if not isinstance(raw, str):
        raise TypeError(f"Summary result must be a string, got {type(raw).__name__}")
    return " ".join(raw.split())


async def _invoke(fn: Callable, text: str) -> Any:
    # Blocking callables (local models, HTTP clients) run in a worker thread
    if inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(getattr(fn, "__call__", None)):
        return await fn(text)
    result = await asyncio.to_thread(fn, text)
    if inspect.isawaitable(result):
        result = await result
    return result


async def _enrich_chunk(
    index: int,
    chunk: Chunk,
    keyword_fn: KeywordFn,
    summary_fn: SummaryFn,
    semaphore: asyncio.Semaphore
) -> None:
    async with semaphore:
        failures: List[EnrichmentFailure] = []

        try:
            keywords = normalize_keywords(await _invoke(keyword_fn, chunk.text))
        except Exception as e:
            failure = EnrichmentFailure(index, "keywords", e)
            logger.warning(str(failure))
            failures.append(failure)
            keywords = []

        try:
            summary = normalize_summary(await _invoke(summary_fn, chunk.text))
        except Exception as e:
            failure = EnrichmentFailure(index, "summary", e)
            logger.warning(str(failure))
            failures.append(failure)
            summary = ""

        # Both fields are set together so a cancelled batch never leaves a half-annotated chunk
        chunk.keywords = keywords
        chunk.summary = summary
        chunk.enrichment_failures.extend(failures)


async def annotate(
    chunks: List[Chunk],
    keyword_fn: KeywordFn,
    summary_fn: SummaryFn,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
) -> List[Chunk]:
    """
    Fills in keywords and summary for every chunk.

    Chunks are processed concurrently (at most max_concurrency at a time) and
    updated in place, so the returned list keeps the input order. A failing
    call never aborts the batch: the chunk gets an empty keyword list or an
    empty summary and the failure is recorded on chunk.enrichment_failures.
    If the coroutine is cancelled, chunks that were not finished keep
    keywords and summary set to None.

    Args:
        chunks: Chunks to annotate.
        keyword_fn: Called with the chunk text; returns keyword phrases.
                    May be a coroutine function or a blocking callable.
        summary_fn: Called with the chunk text; returns a short summary.
        max_concurrency: Maximum number of chunks enriched at the same time.

    Returns:
        The same chunk list, annotated.
    """
    if max_concurrency < 1:
        raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
    if not chunks:
        return chunks

    logger.info(f"Enriching {len(chunks)} chunks (concurrency {max_concurrency})")
    semaphore = asyncio.Semaphore(max_concurrency)
    await asyncio.gather(*(
        _enrich_chunk(index, chunk, keyword_fn, summary_fn, semaphore)
        for index, chunk in enumerate(chunks)
    ))

    failed = sum(1 for chunk in chunks if chunk.enrichment_failures)
    if failed:
        logger.warning(f"Enrichment finished with failures on {failed}/{len(chunks)} chunks")
    else:
        logger.info("Enrichment finished for all chunks")
    return chunks

