"""Unit tests for the Whisper transcriber (model loading is mocked)."""

from unittest.mock import MagicMock, patch

import pytest

from srtchunker.exceptions import TranscriptionError
from srtchunker.srt_parser import parse_track
from srtchunker.transcriber import WhisperTranscriber, whisper_language


@pytest.fixture
def whisper_model():
    model = MagicMock()
    with patch("srtchunker.transcriber.torch.cuda.is_available", return_value=False), \
            patch("srtchunker.transcriber.whisper.load_model", return_value=model) as load_model:
        yield model, load_model


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "speech.wav"
    path.write_bytes(b"RIFF")
    return str(path)


class TestWhisperLanguage:
    @pytest.mark.parametrize("language, expected", [
        ("en-US", "en"),
        ("pt_BR", "pt"),
        ("DE", "de"),
        ("fr", "fr"),
        (None, None),
        ("", None),
    ])
    def test_reduces_to_two_letter_code(self, language, expected):
        assert whisper_language(language) == expected


class TestWhisperTranscriber:
    def test_falls_back_to_cpu(self, whisper_model):
        _, load_model = whisper_model

        transcriber = WhisperTranscriber(model_name="tiny", device="cuda")

        assert transcriber.device == "cpu"
        load_model.assert_called_once_with("tiny", device="cpu")

    def test_rejects_unknown_device(self, whisper_model):
        with pytest.raises(ValueError):
            WhisperTranscriber(device="tpu")

    def test_load_failure_is_wrapped(self):
        with patch("srtchunker.transcriber.torch.cuda.is_available", return_value=False), \
                patch("srtchunker.transcriber.whisper.load_model", side_effect=RuntimeError("no weights")):
            with pytest.raises(TranscriptionError, match="no weights"):
                WhisperTranscriber(device="cpu")

    def test_transcribe_passes_whisper_language(self, whisper_model, audio_file):
        model, _ = whisper_model
        model.transcribe.return_value = {
            "language": "en",
            "segments": [{"start": 0.0, "end": 1.5, "text": " Hello there "}, {"start": 2.0}],
        }

        result = WhisperTranscriber(device="cpu").transcribe(audio_file, language="en-US")

        assert model.transcribe.call_args.kwargs["language"] == "en"
        assert model.transcribe.call_args.kwargs["fp16"] is False
        assert [s.text for s in result.segments] == ["Hello there"]
        assert result.language == "en"

    def test_transcribe_missing_file(self, whisper_model, tmp_path):
        with pytest.raises(FileNotFoundError):
            WhisperTranscriber(device="cpu").transcribe(str(tmp_path / "missing.wav"))

    def test_transcribe_error_is_wrapped(self, whisper_model, audio_file):
        model, _ = whisper_model
        model.transcribe.side_effect = RuntimeError("decoder crashed")

        with pytest.raises(TranscriptionError):
            WhisperTranscriber(device="cpu").transcribe(audio_file)

    def test_srt_output_drops_empty_and_invalid_segments(self, whisper_model, audio_file):
        model, _ = whisper_model
        model.transcribe.return_value = {"segments": [
            {"start": 0.0, "end": 2.0, "text": "First line"},
            {"start": 2.0, "end": 3.0, "text": "   "},
            {"start": 4.0, "end": 4.0, "text": "Zero length"},
            {"start": 6.0, "end": 5.0, "text": "Backwards"},
            {"start": 7.0, "end": 9.5, "text": "Last line"},
        ]}

        srt_text = WhisperTranscriber(device="cpu").transcribe_to_srt(audio_file)

        track = parse_track(srt_text)
        assert [e.text for e in track] == ["First line", "Last line"]
        assert [e.sequence_number for e in track] == [1, 2]
        assert srt_text.startswith("1\n00:00:00,000 --> 00:00:02,000\nFirst line\n\n")

    def test_srt_output_placeholder_when_nothing_usable(self, whisper_model, audio_file):
        model, _ = whisper_model
        model.transcribe.return_value = {"segments": [{"start": 1.0, "end": 1.0, "text": ""}]}

        srt_text = WhisperTranscriber(device="cpu").transcribe_to_srt(audio_file)

        assert srt_text == "1\n00:00:00,000 --> 00:00:01,000\n[No speech detected]\n\n"
