"""Keyword extraction and summarization using Hugging Face models."""

import logging
from typing import List

import torch
from transformers import AutoModelForSeq2SeqLM, AutoTokenizer

from .enrichment import normalize_keywords
from .exceptions import EnrichmentError
from .interfaces import KeywordExtractor, Summarizer

logger = logging.getLogger(__name__)

KEYWORD_PROMPT = (
    "Generate about {count} long-tail keywords describing the main topics of this "
    "video transcript segment. The keywords will be used to search stock video "
    "footage. Answer with a comma-separated list.\n\nText: {text}"
)


class _Seq2SeqModel:
    """Loads a tokenizer/model pair once and runs generation on it."""

    def __init__(self, model_name: str, device: str = "cuda", max_input_length: int = 512):
        """
        Args:
            model_name: The Hugging Face model name or local path.
            device: The device to run the model on ("cuda" or "cpu").
            max_input_length: Tokens kept from the input text.

        Raises:
            ValueError: If the specified device is invalid.
            EnrichmentError: If the model or tokenizer fails to load.
        """
        self.model_name = model_name
        self.device = device
        self.max_input_length = max_input_length

        if self.device == "cuda" and not torch.cuda.is_available():
            logger.warning(f"CUDA device requested but not available for '{model_name}'. Falling back to CPU.")
            self.device = "cpu"
        elif self.device not in ["cuda", "cpu"]:
            raise ValueError(f"Invalid device specified: {self.device}. Choose 'cuda' or 'cpu'.")

        logger.info(f"Loading Hugging Face model '{self.model_name}' on device '{self.device}'")
        try:
            self.tokenizer = AutoTokenizer.from_pretrained(self.model_name)
            self.model = AutoModelForSeq2SeqLM.from_pretrained(self.model_name)
            self.model.to(self.device)
            self.model.eval()
            logger.info(f"Hugging Face model '{self.model_name}' loaded successfully.")
        except Exception as e:
            logger.error(f"Failed to load model or tokenizer '{self.model_name}': {e}", exc_info=True)
            raise EnrichmentError(f"Failed to load model/tokenizer '{self.model_name}': {e}") from e

    def generate(self, prompt: str, **generate_kwargs) -> str:
        try:
            inputs = self.tokenizer(prompt, return_tensors="pt", truncation=True, max_length=self.max_input_length)
            inputs = {k: v.to(self.device) for k, v in inputs.items()}
            with torch.no_grad():
                output_tokens = self.model.generate(**inputs, **generate_kwargs)
            return self.tokenizer.decode(output_tokens[0], skip_special_tokens=True).strip()
        except Exception as e:
            logger.error(f"Generation with '{self.model_name}' failed for '{prompt[:50]}...': {e}", exc_info=True)
            raise EnrichmentError(f"Hugging Face generation failed: {e}") from e


class HuggingFaceKeywordExtractor(KeywordExtractor):
    """Asks an instruction-tuned seq2seq model for stock-footage search keywords."""

    def __init__(self, model_name: str = "google/flan-t5-base", device: str = "cuda", max_keywords: int = 5):
        if max_keywords < 1:
            raise ValueError("max_keywords must be at least 1.")
        self.max_keywords = max_keywords
        self._model = _Seq2SeqModel(model_name, device=device)

    def extract_keywords(self, text: str) -> List[str]:
        if not text.strip():
            return []
        logger.debug(f"Extracting keywords for: '{text[:50]}...'")
        prompt = KEYWORD_PROMPT.format(count=self.max_keywords, text=text)
        raw = self._model.generate(prompt, max_new_tokens=64, num_beams=4)
        keywords = normalize_keywords(raw)[:self.max_keywords]
        logger.debug(f"Keywords: {keywords}")
        return keywords


class HuggingFaceSummarizer(Summarizer):
    """Summarizes chunk text with an abstractive summarization model."""

    def __init__(self, model_name: str = "sshleifer/distilbart-cnn-12-6", device: str = "cuda", max_summary_tokens: int = 60):
        self.max_summary_tokens = max_summary_tokens
        self._model = _Seq2SeqModel(model_name, device=device, max_input_length=1024)

    def summarize(self, text: str) -> str:
        if not text.strip():
            return ""
        logger.debug(f"Summarizing: '{text[:50]}...'")
        summary = self._model.generate(
            text,
            max_new_tokens=self.max_summary_tokens,
            min_length=5,
            num_beams=4,
            no_repeat_ngram_size=3,
        )
        logger.debug(f"Summary: '{summary[:50]}...'")
        return summary
