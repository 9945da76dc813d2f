"""Command-Line Interface handler for srtchunker."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .audio_extractor import AudioExtractor
from .config_loader import ChunkerSettings, ConfigLoader
from .exceptions import ConfigurationError, SrtChunkerError
from .log_setup import setup_logging
from .pipeline import ChunkingPipeline
from .timecode import format_range

logger = logging.getLogger(__name__)


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Options shared by the single-file and batch entry points."""
    parser.add_argument(
        "-c", "--config",
        default="config.yaml",
        help="Path to the configuration YAML file. Defaults apply if it does not exist."
    )
    parser.add_argument(
        "--temp-dir",
        default=None,
        help="Override the temporary directory specified in the config file."
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level for console and file output."
    )
    parser.add_argument(
        "--device",
        default=None,
        choices=["cuda", "cpu"],
        help="Override the processing device (cuda or cpu) specified in config."
    )
    parser.add_argument(
        "--max-span",
        type=float,
        default=None,
        help="Override the maximum chunk span in seconds (e.g. 15 or 30)."
    )
    parser.add_argument(
        "--language",
        default=None,
        help="Override the transcription language (e.g. en-US)."
    )
    parser.add_argument(
        "--no-enrich",
        action="store_true",
        help="Skip keyword and summary generation."
    )
    parser.add_argument(
        "--search-clips",
        action="store_true",
        help="Search Pexels for stock clips matching each chunk's keywords."
    )


def load_settings(args: argparse.Namespace) -> ChunkerSettings:
    """
    Loads the YAML config (if present), applies CLI overrides and validates.

    Raises:
        ConfigurationError: If the file or the resulting settings are invalid.
    """
    config = {}
    if os.path.exists(args.config):
        config = ConfigLoader().load_config(args.config)
    else:
        logger.warning(f"Configuration file {args.config} not found. Using defaults.")

    overrides = {
        "temp_dir": args.temp_dir,
        "device": args.device,
        "max_span_seconds": args.max_span,
        "language": args.language,
    }
    for key, value in overrides.items():
        if value is not None:
            logger.info(f"Overriding {key} from config with CLI argument: {value}")
            config[key] = value
    if args.no_enrich:
        config["enrich"] = False
    if args.search_clips:
        config["search_clips"] = True

    return ChunkerSettings.from_dict(config)


def build_pipeline(settings: ChunkerSettings, needs_transcription: bool) -> ChunkingPipeline:
    """
    Instantiates only the collaborators the run needs.

    Model-backed collaborators are imported lazily so that plain SRT runs
    without enrichment never load torch, whisper or transformers.
    """
    transcriber = None
    audio_extractor = None
    if needs_transcription:
        from .transcriber import WhisperTranscriber
        audio_extractor = AudioExtractor(ffmpeg_path=settings.ffmpeg_path)
        transcriber = WhisperTranscriber(
            model_name=settings.whisper_model,
            device=settings.device,
            fp16=settings.whisper_fp16 if settings.device == 'cuda' else False
        )

    keyword_extractor = None
    summarizer = None
    if settings.enrich:
        from .text_analysis import HuggingFaceKeywordExtractor, HuggingFaceSummarizer
        keyword_extractor = HuggingFaceKeywordExtractor(
            model_name=settings.keyword_model,
            device=settings.device,
            max_keywords=settings.max_keywords
        )
        summarizer = HuggingFaceSummarizer(model_name=settings.summary_model, device=settings.device)

    clip_search = None
    if settings.search_clips:
        from .video_search import PexelsClient
        clip_search = PexelsClient(
            api_key=settings.pexels_api_key,
            timeout=settings.request_timeout,
            orientation=settings.pexels_orientation
        )

    return ChunkingPipeline(
        settings=settings,
        transcriber=transcriber,
        audio_extractor=audio_extractor,
        keyword_extractor=keyword_extractor,
        summarizer=summarizer,
        clip_search=clip_search
    )


class CLIHandler:
    """Parses arguments and runs the chunking pipeline for one input file."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="srtchunker: split a transcript into time-bounded chunks with keywords and summaries.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
        parser.add_argument(
            "-i", "--input",
            required=True,
            help="Path to an .srt file, or to audio/video to transcribe first."
        )
        parser.add_argument(
            "-o", "--output-dir",
            required=True,
            help="Directory to save the normalized track, chunk track and chunk JSON."
        )
        add_common_arguments(parser)
        return parser

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Parses arguments, sets up logging, loads config and runs the pipeline. Returns the exit code."""
        args = self.parser.parse_args(argv)

        log_level = getattr(logging, args.log_level.upper(), logging.INFO)
        setup_logging(log_level=log_level, log_dir=None)

        try:
            settings = load_settings(args)
        except (ConfigurationError, FileNotFoundError) as e:
            logger.critical(f"Failed to load configuration from {args.config}: {e}")
            return 1

        setup_logging(log_level=log_level, log_dir=settings.log_dir, log_file=settings.log_file)

        if not os.path.isfile(args.input):
            logger.critical(f"Input file not found or is not a file: {args.input}")
            return 1

        try:
            logger.info("Initializing srtchunker components...")
            pipeline = build_pipeline(settings, needs_transcription=not ChunkingPipeline.is_subtitle_file(args.input))
            logger.info("Components initialized successfully.")

            result = pipeline.run(args.input, args.output_dir)
            for index, chunk in enumerate(result.chunks, start=1):
                logger.info(f"Chunk {index}: {format_range(chunk.start_time, chunk.end_time)} | keywords: {chunk.keywords_display} | summary: {chunk.summary_display}")
            logger.info("srtchunker finished successfully.")
            return 0

        except SrtChunkerError as e:
            logger.error(f"An srtchunker error occurred: {e}")
            return 1
        except KeyboardInterrupt:
            logger.warning("Process interrupted by user (Ctrl+C). Exiting.")
            return 1
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred at the top level: {e}", exc_info=True)
            return 2


def main() -> None:
    """Console script entry point."""
    sys.exit(CLIHandler().run())
