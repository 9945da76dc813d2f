"""Groups consecutive subtitle entries into bounded-duration chunks."""

import logging
from typing import Iterable, List

from .models import Chunk, SubtitleEntry

logger = logging.getLogger(__name__)

DEFAULT_MAX_SPAN_SECONDS = 30.0


def group_entries(entries: Iterable[SubtitleEntry], max_span_seconds: float = DEFAULT_MAX_SPAN_SECONDS) -> List[Chunk]:
    """
    Greedily folds entries into chunks in a single pass.

    An entry joins the open chunk when it ends no later than
    ``chunk_start + max_span_seconds``; otherwise the open chunk is closed and
    the entry seeds the next one. A seed entry is always accepted, even when
    its own duration exceeds the span.

    Args:
        entries: Subtitle entries in track order.
        max_span_seconds: Maximum span of a chunk measured from its first entry's start.

    Returns:
        Chunks in the order their entries were folded in. Empty input gives
        an empty list.

    Raises:
        ValueError: If max_span_seconds is not positive.
    """
    if max_span_seconds <= 0:
        raise ValueError(f"max_span_seconds must be > 0, got {max_span_seconds}")

    chunks: List[Chunk] = []
    members: List[SubtitleEntry] = []
    chunk_start = 0.0
    chunk_end = 0.0

    def close() -> None:
        chunks.append(Chunk(
            start_time=chunk_start,
            end_time=chunk_end,
            text=" ".join(member.text for member in members),
            entries=tuple(members),
        ))

    for entry in entries:
        if members and entry.end_time <= chunk_start + max_span_seconds:
            members.append(entry)
            chunk_end = max(chunk_end, entry.end_time)
            continue

        if members:
            close()
        members = [entry]
        chunk_start = entry.start_time
        chunk_end = entry.end_time

    if members:
        close()

    logger.debug(f"Grouped entries into {len(chunks)} chunks (max span {max_span_seconds}s)")
    return chunks
