#!/usr/bin/env python3
"""
Token counting for extracted segments.

TiktokenCounter gives exact counts for OpenAI-style models. ApproxTokenCounter
is the chars-per-token estimate for runs without the tiktoken encoding files.
SafeTokenCounter wraps either one so a counting failure never aborts a run.
"""

from __future__ import annotations
import logging
import math
import os
from typing import Callable, Optional

import tiktoken  # For accurate token counting

log = logging.getLogger(__name__)

DEFAULT_ENCODING = os.environ.get("SECTION_EXTRACTOR_ENCODING", "cl100k_base")

TokenCountFn = Callable[[str], int]


def approx_token_count(text: str, chars_per_token: float = 4.0) -> int:
    """Length-based estimate for runs without the tiktoken encoding files."""
    if chars_per_token <= 0:
        raise ValueError(f"chars_per_token must be positive, got {chars_per_token}")
    return math.ceil(len(text) / chars_per_token) if text else 0


class TiktokenCounter:
    def __init__(self, encoding_name: str = DEFAULT_ENCODING):
        """
        Args:
            encoding_name: tiktoken encoding, loaded on first use
        """
        self.encoding_name = encoding_name
        self._tokenizer = None

    @property
    def tokenizer(self):
        if self._tokenizer is None:
            self._tokenizer = tiktoken.get_encoding(self.encoding_name)
        return self._tokenizer

    def __call__(self, text: str) -> int:
        """Count tokens in text using tiktoken."""
        if not text:
            return 0
        return len(self.tokenizer.encode(text))


class ApproxTokenCounter:
    def __init__(self, chars_per_token: float = 4.0):
        if chars_per_token <= 0:
            raise ValueError(f"chars_per_token must be positive, got {chars_per_token}")
        self.chars_per_token = chars_per_token

    def __call__(self, text: str) -> int:
        return approx_token_count(text, self.chars_per_token)


class SafeTokenCounter:
    """Returns 0 (and logs) instead of raising when the wrapped counter fails."""

    def __init__(self, inner: Optional[TokenCountFn] = None):
        self.inner = inner if inner is not None else TiktokenCounter()
        self.failures = 0

    def __call__(self, text: str) -> int:
        try:
            n = int(self.inner(text))
        except Exception as e:
            self.failures += 1
            log.warning("[warn] token counter failed on %d chars: %s", len(text or ""), e)
            return 0
        if n < 0:
            self.failures += 1
            log.warning("[warn] token counter returned %d; using 0", n)
            return 0
        return n
