"""Orchestrates the transcript chunking pipeline."""

import asyncio
import logging
import os
import time
from typing import Dict, List, Optional, Tuple

from .audio_extractor import AudioExtractor
from .chunker import group_entries
from .config_loader import ChunkerSettings
from .enrichment import annotate
from .exceptions import ConfigurationError, SrtChunkerError, VideoSearchError
from .interfaces import ClipSearch, KeywordExtractor, Summarizer, Transcriber
from .models import Chunk, ChunkingResult, VideoClip
from .srt_parser import SRTParser
from .subtitle_formatter import SRTFormatter, SubtitleFormatter
from .utils import ensure_dir_exists, write_json, write_text

logger = logging.getLogger(__name__)

SUBTITLE_EXTENSIONS = (".srt",)


class ChunkingPipeline:
    """
    Turns a subtitle track (or audio that gets transcribed into one) into
    annotated, time-bounded chunks and writes the results to disk.
    """

    def __init__(
        self,
        settings: ChunkerSettings,
        formatter: Optional[SubtitleFormatter] = None,
        transcriber: Optional[Transcriber] = None,
        audio_extractor: Optional[AudioExtractor] = None,
        keyword_extractor: Optional[KeywordExtractor] = None,
        summarizer: Optional[Summarizer] = None,
        clip_search: Optional[ClipSearch] = None,
    ):
        """
        Args:
            settings: Validated run settings.
            formatter: Subtitle formatter for both output tracks; SRT by default.
            transcriber: Needed only for non-subtitle inputs.
            audio_extractor: Needed only for non-subtitle inputs.
            keyword_extractor: Keyword collaborator used when settings.enrich is set.
            summarizer: Summary collaborator used when settings.enrich is set.
            clip_search: Stock clip collaborator used when settings.search_clips is set.
        """
        self.settings = settings
        self.formatter = formatter or SRTFormatter()
        self.parser = SRTParser()
        self.transcriber = transcriber
        self.audio_extractor = audio_extractor
        self.keyword_extractor = keyword_extractor
        self.summarizer = summarizer
        self.clip_search = clip_search

        if settings.enrich and (keyword_extractor is None or summarizer is None):
            logger.warning("Enrichment is enabled but keyword/summary collaborators are missing. Chunks will not be annotated.")
        if settings.search_clips and clip_search is None:
            logger.warning("Clip search is enabled but no search client was provided. Skipping clip search.")

    @staticmethod
    def is_subtitle_file(path: str) -> bool:
        return os.path.splitext(path)[1].lower() in SUBTITLE_EXTENSIONS

    def _get_output_paths(self, input_path: str, output_dir: str) -> Tuple[str, str, str]:
        base_name = os.path.splitext(os.path.basename(input_path))[0]
        return (
            os.path.join(output_dir, f"{base_name}.normalized.srt"),
            os.path.join(output_dir, f"{base_name}.chunks.srt"),
            os.path.join(output_dir, f"{base_name}.chunks.json"),
        )

    def _cleanup_temp_files(self, *file_paths: Optional[str]) -> None:
        for file_path in file_paths:
            if file_path and os.path.exists(file_path):
                try:
                    os.remove(file_path)
                    logger.info(f"Cleaned up temporary file: {file_path}")
                except OSError as e:
                    logger.warning(f"Could not remove temporary file {file_path}: {e}")

    def load_track_text(self, input_path: str) -> Tuple[str, Optional[str]]:
        """
        Returns the raw SRT text for an input file.

        Subtitle files are read as-is. Anything else is treated as audio or
        video: converted to WAV and transcribed.

        Returns:
            Tuple of (srt_text, temporary_audio_path or None).

        Raises:
            FileNotFoundError: If the input does not exist.
            ConfigurationError: If media input arrives without a transcriber.
        """
        if not os.path.isfile(input_path):
            raise FileNotFoundError(f"Input file not found: {input_path}")

        if self.is_subtitle_file(input_path):
            return self.parser.read_file(input_path), None

        if self.transcriber is None or self.audio_extractor is None:
            raise ConfigurationError(f"Input '{input_path}' is not a subtitle file and no transcriber is configured.")

        return self._transcribe_media(input_path)

    def transcribe_audio_bytes(self, data: bytes, filename: str) -> str:
        """
        Transcribes in-memory audio (e.g. a synthesized voice-over) into SRT text.

        The bytes are written under settings.temp_dir, converted and
        transcribed; every temporary file is removed afterwards.

        Raises:
            ConfigurationError: If no transcriber is configured.
            ValueError: If data is empty.
        """
        if self.transcriber is None or self.audio_extractor is None:
            raise ConfigurationError("Audio input requires a transcriber and an audio extractor.")

        source_path = self.audio_extractor.write_audio_bytes(data, self.settings.temp_dir, filename)
        audio_path = None
        try:
            srt_text, audio_path = self._transcribe_media(source_path)
            return srt_text
        finally:
            self._cleanup_temp_files(audio_path, source_path)

    def _transcribe_media(self, media_path: str) -> Tuple[str, str]:
        ensure_dir_exists(self.settings.temp_dir)
        base_name = os.path.splitext(os.path.basename(media_path))[0]
        audio_path = self.audio_extractor.extract_audio(
            media_path, self.settings.temp_dir, f"{base_name}_{int(time.time())}"
        )
        try:
            srt_text = self.transcriber.transcribe_to_srt(audio_path, language=self.settings.language)
        except BaseException:
            self._cleanup_temp_files(audio_path)
            raise
        return srt_text, audio_path

    def _search_clips(self, chunks: List[Chunk]) -> Dict[int, List[VideoClip]]:
        clips: Dict[int, List[VideoClip]] = {}
        for index, chunk in enumerate(chunks):
            if not chunk.keywords:
                logger.debug(f"Chunk {index + 1} has no keywords; skipping clip search.")
                clips[index] = []
                continue
            query = chunk.keywords[0]
            try:
                clips[index] = self.clip_search.search(query, per_page=self.settings.clips_per_chunk)
            except VideoSearchError as e:
                logger.warning(f"Clip search failed for chunk {index + 1} ('{query}'): {e}")
                clips[index] = []
        return clips

    async def process_text_async(self, raw_srt: str, source_path: Optional[str] = None) -> ChunkingResult:
        """
        Parses, groups, annotates and re-renders a subtitle track.

        Raises:
            EmptyTrack: If the track has no valid entries.
        """
        track = self.parser.parse(raw_srt)
        if track.malformed:
            logger.warning(f"{len(track.malformed)} malformed subtitle blocks were skipped.")
        logger.info(f"Parsed {len(track)} subtitle entries.")

        chunks = group_entries(track.entries, self.settings.max_span_seconds)
        logger.info(f"Grouped into {len(chunks)} chunks of at most {self.settings.max_span_seconds}s.")

        if self.settings.enrich and self.keyword_extractor is not None and self.summarizer is not None:
            await annotate(
                chunks,
                self.keyword_extractor.extract_keywords,
                self.summarizer.summarize,
                max_concurrency=self.settings.max_concurrency,
            )
            annotated = sum(1 for chunk in chunks if chunk.is_annotated)
            logger.info(f"Annotated {annotated}/{len(chunks)} chunks.")

        clips: Dict[int, List[VideoClip]] = {}
        if self.settings.search_clips and self.clip_search is not None:
            clips = await asyncio.to_thread(self._search_clips, chunks)

        return ChunkingResult(
            track=track,
            chunks=chunks,
            normalized_srt=self.formatter.render(track.entries, max_chars_per_line=self.settings.wrap_chars),
            chunks_srt=self.formatter.render(chunks, max_chars_per_line=self.settings.wrap_chars),
            clips=clips,
            source_path=source_path,
        )

    def process_text(self, raw_srt: str, source_path: Optional[str] = None) -> ChunkingResult:
        """Synchronous wrapper around process_text_async."""
        return asyncio.run(self.process_text_async(raw_srt, source_path=source_path))

    def write_outputs(self, result: ChunkingResult, input_path: str, output_dir: str) -> Tuple[str, str, str]:
        """Writes the normalized track, the chunk track and the chunk JSON."""
        ensure_dir_exists(output_dir)
        normalized_path, chunks_path, json_path = self._get_output_paths(input_path, output_dir)
        write_text(normalized_path, result.normalized_srt)
        write_text(chunks_path, result.chunks_srt)
        write_json(json_path, result.to_dict())
        logger.info(f"Wrote {normalized_path}, {chunks_path} and {json_path}")
        return normalized_path, chunks_path, json_path

    def run(self, input_path: str, output_dir: str) -> ChunkingResult:
        """
        Executes the full pipeline for a single input file.

        Args:
            input_path: An .srt file, or audio/video to transcribe first.
            output_dir: Directory for the output files.

        Raises:
            SrtChunkerError: For any configuration or processing errors in the pipeline.
            FileNotFoundError: If the input file is not found.
        """
        start_time = time.time()
        logger.info(f"--- Starting chunking for: {input_path} ---")
        temp_audio_path = None

        try:
            logger.info("Step 1: Loading subtitle track...")
            raw_srt, temp_audio_path = self.load_track_text(input_path)

            logger.info("Step 2: Parsing, grouping and enriching...")
            result = self.process_text(raw_srt, source_path=input_path)

            logger.info("Step 3: Writing outputs...")
            self.write_outputs(result, input_path, output_dir)

            logger.info(f"--- Chunking completed in {time.time() - start_time:.2f} seconds ---")
            return result

        except (SrtChunkerError, FileNotFoundError) as e:
            logger.error(f"Chunking failed for {input_path}: {e}")
            raise
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred while chunking {input_path}: {e}", exc_info=True)
            raise SrtChunkerError(f"An unexpected critical error occurred: {e}") from e
        finally:
            self._cleanup_temp_files(temp_audio_path)
