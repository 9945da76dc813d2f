#!/usr/bin/env python3
"""
srtchunker Batch Processing Entry Point

Processes every subtitle, audio and video file in a directory, ordered by
size, writing the chunk outputs into a Chunks/ subfolder.
"""

import argparse
import logging
import os
import sys
import time
from typing import List, Tuple

# Progress bar library
from tqdm import tqdm

from srtchunker.cli import add_common_arguments, build_pipeline, load_settings
from srtchunker.exceptions import ConfigurationError, FileSystemError, SrtChunkerError
from srtchunker.log_setup import setup_logging
from srtchunker.pipeline import ChunkingPipeline
from srtchunker.utils import ensure_dir_exists

logger = logging.getLogger(__name__)

MEDIA_EXTENSIONS = (".srt", ".mp3", ".wav", ".m4a", ".ogg", ".flac", ".mp4", ".mov", ".mkv", ".webm")


def find_and_sort_inputs(input_dir: str) -> List[Tuple[str, int]]:
    """
    Finds all supported input files in the directory and sorts them by size.

    Args:
        input_dir: The directory to search.

    Returns:
        A list of (filepath, filesize) tuples, smallest first.

    Raises:
        FileNotFoundError: If the input directory doesn't exist.
        ValueError: If the input path is not a directory.
    """
    if not os.path.exists(input_dir):
        raise FileNotFoundError(f"Input directory not found: {input_dir}")
    if not os.path.isdir(input_dir):
        raise ValueError(f"Input path is not a directory: {input_dir}")

    inputs = []
    logger.info(f"Scanning directory for input files: {input_dir}")
    for filename in os.listdir(input_dir):
        if not filename.lower().endswith(MEDIA_EXTENSIONS):
            continue
        filepath = os.path.join(input_dir, filename)
        try:
            if os.path.isfile(filepath):
                inputs.append((filepath, os.path.getsize(filepath)))
        except OSError as e:
            logger.warning(f"Could not access file {filepath}: {e}. Skipping.")

    inputs.sort(key=lambda item: item[1])
    logger.info(f"Found {len(inputs)} input files. Sorted by size (smallest first).")
    return inputs


def run_batch_processing() -> int:
    """Parses arguments, sets up, and runs the batch chunking. Returns the exit code."""
    parser = argparse.ArgumentParser(
        description="srtchunker batch: chunk every transcript or recording in a directory.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "-i", "--input-dir",
        required=True,
        help="Directory containing .srt files and/or audio/video recordings."
    )
    add_common_arguments(parser)
    args = parser.parse_args()

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    setup_logging(log_level=log_level, log_dir=None)

    try:
        settings = load_settings(args)
    except (ConfigurationError, FileNotFoundError) as e:
        logger.critical(f"Failed to load configuration: {e}")
        return 1

    setup_logging(log_level=log_level, log_dir=settings.log_dir, log_file="srtchunker_batch.log")

    try:
        inputs = [path for path, _ in find_and_sort_inputs(args.input_dir)]
    except (FileNotFoundError, ValueError) as e:
        logger.critical(f"Input directory error: {e}")
        return 1
    if not inputs:
        logger.warning(f"No supported files found in {args.input_dir}. Exiting.")
        return 0

    output_dir = os.path.join(args.input_dir, "Chunks")
    try:
        ensure_dir_exists(output_dir)
    except FileSystemError as e:
        logger.critical(f"Could not create output directory: {e}")
        return 1

    # Components are built once and reused for every file
    needs_transcription = any(not ChunkingPipeline.is_subtitle_file(path) for path in inputs)
    try:
        pipeline = build_pipeline(settings, needs_transcription=needs_transcription)
    except SrtChunkerError as e:
        logger.critical(f"Failed to initialize srtchunker components: {e}")
        return 1

    files_processed = 0
    files_failed = 0
    batch_start_time = time.time()
    logger.info(f"--- Starting batch chunking for {len(inputs)} files ---")

    with tqdm(total=len(inputs), unit="file", desc="Starting Batch") as pbar:
        for input_path in inputs:
            filename = os.path.basename(input_path)
            pbar.set_description(f"Processing: {filename[:30]}...")
            try:
                result = pipeline.run(input_path, output_dir)
                logger.info(f"{filename}: {len(result.chunks)} chunks written.")
                files_processed += 1
            except SrtChunkerError as e:
                logger.error(f"Chunking failed for '{filename}': {e}")
                files_failed += 1
            except KeyboardInterrupt:
                logger.warning("Batch process interrupted by user (Ctrl+C). Exiting.")
                return 1
            except Exception as e:
                logger.error(f"An unexpected error occurred processing '{filename}': {e}", exc_info=True)
                files_failed += 1
            finally:
                pbar.update(1)

    logger.info("--- Batch chunking finished ---")
    logger.info(f"Total time: {time.time() - batch_start_time:.2f} seconds")
    logger.info(f"Successfully processed: {files_processed}/{len(inputs)} files")
    logger.info(f"Failed: {files_failed}/{len(inputs)} files")
    return 1 if files_failed else 0


if __name__ == "__main__":
    sys.exit(run_batch_processing())
