"""Unit tests for the ffmpeg audio preparation step."""

from unittest.mock import MagicMock, patch

import ffmpeg
import pytest

from srtchunker.audio_extractor import AudioExtractor
from srtchunker.exceptions import AudioExtractionError


@pytest.fixture
def extractor():
    return AudioExtractor(ffmpeg_path="/usr/bin/ffmpeg")


def test_write_audio_bytes(tmp_path, extractor):
    path = extractor.write_audio_bytes(b"RIFF....WAVE", str(tmp_path / "voice"), "../narration.wav")

    assert path == str(tmp_path / "voice" / "narration.wav")
    assert (tmp_path / "voice" / "narration.wav").read_bytes() == b"RIFF....WAVE"


def test_write_audio_bytes_rejects_empty(tmp_path, extractor):
    with pytest.raises(ValueError):
        extractor.write_audio_bytes(b"", str(tmp_path), "empty.wav")


def test_extract_audio_missing_input(tmp_path, extractor):
    with pytest.raises(FileNotFoundError):
        extractor.extract_audio(str(tmp_path / "missing.mp4"), str(tmp_path))


def test_extract_audio_builds_mono_16k_wav(tmp_path, extractor):
    media = tmp_path / "talk.mp4"
    media.write_bytes(b"\x00")
    stream = MagicMock()
    stream.output.return_value = stream
    stream.overwrite_output.return_value = stream

    with patch("srtchunker.audio_extractor.ffmpeg.input", return_value=stream) as mock_input:
        path = extractor.extract_audio(str(media), str(tmp_path / "temp"), "talk_123")

    assert path == str(tmp_path / "temp" / "talk_123.wav")
    mock_input.assert_called_once_with(str(media))
    stream.output.assert_called_once_with(path, acodec="pcm_s16le", ar=16000, ac=1)
    stream.run.assert_called_once_with(cmd="/usr/bin/ffmpeg", capture_stdout=True, capture_stderr=True)


def test_extract_audio_wraps_ffmpeg_error(tmp_path, extractor):
    media = tmp_path / "talk.mp4"
    media.write_bytes(b"\x00")
    stream = MagicMock()
    stream.output.return_value = stream
    stream.overwrite_output.return_value = stream
    stream.run.side_effect = ffmpeg.Error("ffmpeg", b"", b"Invalid data found when processing input")

    with patch("srtchunker.audio_extractor.ffmpeg.input", return_value=stream):
        with pytest.raises(AudioExtractionError, match="Invalid data"):
            extractor.extract_audio(str(media), str(tmp_path))


def test_extract_audio_wraps_missing_binary(tmp_path, extractor):
    media = tmp_path / "talk.mp4"
    media.write_bytes(b"\x00")
    stream = MagicMock()
    stream.output.return_value = stream
    stream.overwrite_output.return_value = stream
    stream.run.side_effect = FileNotFoundError("ffmpeg")

    with patch("srtchunker.audio_extractor.ffmpeg.input", return_value=stream):
        with pytest.raises(AudioExtractionError):
            extractor.extract_audio(str(media), str(tmp_path))
