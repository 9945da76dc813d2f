"""Unit tests for the chunk enrichment orchestrator."""

import asyncio
import threading

import pytest

from srtchunker.enrichment import annotate, normalize_keywords, normalize_summary
from srtchunker.exceptions import EnrichmentFailure
from srtchunker.models import Chunk


def _chunks(*texts):
    return [Chunk(start_time=i * 10.0, end_time=i * 10.0 + 5.0, text=t) for i, t in enumerate(texts)]


async def _keywords(text):
    return [f"{text} keyword", f"{text} topic"]


async def _summary(text):
    return f"Summary of {text}."


async def _failing(text):
    raise RuntimeError("service unavailable")


# ---------------------------------------------------------------------------
# annotate
# ---------------------------------------------------------------------------

class TestAnnotate:
    @pytest.mark.asyncio
    async def test_populates_keywords_and_summary(self):
        chunks = _chunks("storm", "election")

        result = await annotate(chunks, _keywords, _summary)

        assert result is chunks
        assert chunks[0].keywords == ["storm keyword", "storm topic"]
        assert chunks[0].summary == "Summary of storm."
        assert chunks[1].summary == "Summary of election."
        assert all(c.enrichment_failures == [] for c in chunks)

    @pytest.mark.asyncio
    async def test_order_is_preserved_when_later_chunks_finish_first(self):
        chunks = _chunks("a", "b", "c", "d")
        delays = {"a": 0.05, "b": 0.03, "c": 0.01, "d": 0.0}
        finished = []

        async def slow_keywords(text):
            await asyncio.sleep(delays[text])
            finished.append(text)
            return [text]

        await annotate(chunks, slow_keywords, _summary, max_concurrency=4)

        assert finished == ["d", "c", "b", "a"]
        assert [c.keywords for c in chunks] == [["a"], ["b"], ["c"], ["d"]]

    @pytest.mark.asyncio
    async def test_keyword_failure_is_not_fatal(self):
        chunks = _chunks("one", "two", "three")

        result = await annotate(chunks, _failing, _summary)

        assert len(result) == 3
        for chunk in result:
            assert chunk.keywords == []
            assert chunk.summary.startswith("Summary of")
            assert len(chunk.enrichment_failures) == 1
            failure = chunk.enrichment_failures[0]
            assert isinstance(failure, EnrichmentFailure)
            assert failure.field == "keywords"
            assert isinstance(failure.cause, RuntimeError)

    @pytest.mark.asyncio
    async def test_both_failures_leave_empty_values(self):
        chunks = _chunks("one")

        await annotate(chunks, _failing, _failing)

        assert chunks[0].keywords == []
        assert chunks[0].summary == ""
        assert {f.field for f in chunks[0].enrichment_failures} == {"keywords", "summary"}
        assert chunks[0].keywords_display == "N/A"
        assert chunks[0].summary_display == "N/A"

    @pytest.mark.asyncio
    async def test_one_failing_chunk_does_not_affect_others(self):
        chunks = _chunks("ok", "bad", "ok too")

        async def flaky(text):
            if text == "bad":
                raise TimeoutError("timed out")
            return [text]

        await annotate(chunks, flaky, _summary)

        assert chunks[0].keywords == ["ok"]
        assert chunks[1].keywords == []
        assert chunks[2].keywords == ["ok too"]

    @pytest.mark.asyncio
    async def test_invalid_result_types_count_as_failures(self):
        chunks = _chunks("x")

        async def bad_keywords(text):
            return 42

        async def bad_summary(text):
            return ["not", "text"]

        await annotate(chunks, bad_keywords, bad_summary)

        assert chunks[0].keywords == []
        assert chunks[0].summary == ""
        assert len(chunks[0].enrichment_failures) == 2

    @pytest.mark.asyncio
    async def test_blocking_callables_run_in_worker_threads(self):
        chunks = _chunks("alpha", "beta")
        main_thread = threading.get_ident()
        seen_threads = set()

        def blocking_keywords(text):
            seen_threads.add(threading.get_ident())
            return f"{text} one, {text} two"

        def blocking_summary(text):
            return text.upper()

        await annotate(chunks, blocking_keywords, blocking_summary)

        assert main_thread not in seen_threads
        assert chunks[0].keywords == ["alpha one", "alpha two"]
        assert chunks[1].summary == "BETA"

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self):
        chunks = _chunks(*[f"c{i}" for i in range(8)])
        active = 0
        peak = 0

        async def tracked(text):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return [text]

        await annotate(chunks, tracked, _summary, max_concurrency=2)

        assert peak <= 2
        assert all(c.keywords for c in chunks)

    @pytest.mark.asyncio
    async def test_cancellation_keeps_unfinished_chunks_unannotated(self):
        chunks = _chunks("fast", "slow")
        fast_done = asyncio.Event()

        async def keywords(text):
            if text == "slow":
                await asyncio.sleep(10)
            return [text]

        async def summary(text):
            if text == "fast":
                fast_done.set()
            return text

        task = asyncio.ensure_future(annotate(chunks, keywords, summary, max_concurrency=2))
        await fast_done.wait()
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert chunks[0].keywords == ["fast"]
        assert chunks[0].summary == "fast"
        assert chunks[1].keywords is None
        assert chunks[1].summary is None

    @pytest.mark.asyncio
    async def test_empty_chunk_list(self):
        assert await annotate([], _keywords, _summary) == []

    @pytest.mark.asyncio
    async def test_rejects_zero_concurrency(self):
        with pytest.raises(ValueError):
            await annotate(_chunks("a"), _keywords, _summary, max_concurrency=0)


# ---------------------------------------------------------------------------
# Result normalization
# ---------------------------------------------------------------------------

class TestNormalizeKeywords:
    def test_list_drops_non_strings_and_blanks(self):
        assert normalize_keywords(["city skyline", 3, None, "  ", "night traffic"]) == ["city skyline", "night traffic"]

    def test_delimited_string(self):
        assert normalize_keywords("city skyline, night traffic;\n- rain on glass") == \
            ["city skyline", "night traffic", "rain on glass"]

    def test_duplicates_removed_case_insensitively(self):
        assert normalize_keywords(["Stock Market", "stock market", "trading floor"]) == ["Stock Market", "trading floor"]

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            normalize_keywords({"keywords": []})


class TestNormalizeSummary:
    def test_collapses_whitespace(self):
        assert normalize_summary("  Two   lines\nof text ") == "Two lines of text"

    def test_rejects_non_string(self):
        with pytest.raises(TypeError):
            normalize_summary(None)
