"""Text chunking and vector similarity helpers shared across the engine."""

import re
from collections.abc import Sequence
from functools import lru_cache

import numpy as np

# CJK full-width terminators and newline end a sentence on their own; the
# ASCII ones only when followed by whitespace or end of text ("3.5 mg").
SENTENCE_TERMINATORS = "。！？!?.\n"


@lru_cache(maxsize=16)
def _boundary_pattern(terminators: str) -> re.Pattern[str]:
    wide = "".join(t for t in terminators if t == "\n" or not t.isascii())
    narrow = "".join(t for t in terminators if t != "\n" and t.isascii())

    alternatives = []
    if wide:
        wide_class = re.escape(wide)
        alternatives.append(f"(?<=[{wide_class}])(?![{wide_class}])")
    if narrow:
        alternatives.append(f"(?<=[{re.escape(narrow)}])(?=\\s)")
    if not alternatives:
        raise ValueError("terminators must contain at least one character")
    return re.compile("|".join(alternatives))


def split_sentences(text: str, terminators: str = SENTENCE_TERMINATORS) -> list[str]:
    """Split text into sentences, keeping each terminator with its sentence.

    Concatenating the returned pieces reproduces ``text`` exactly.

    Args:
        text: Text to split.
        terminators: Characters that end a sentence.

    Returns:
        List of sentence strings (may include whitespace-only pieces).
    """
    if not text:
        return []
    return [piece for piece in _boundary_pattern(terminators).split(text) if piece]


def chunk_text(
    text: str,
    max_chunk_size: int = 500,
    terminators: str = SENTENCE_TERMINATORS,
) -> list[str]:
    """Split document text into bounded-size chunks at sentence boundaries.

    Sentences are accumulated greedily. When appending the next sentence
    would push a non-empty buffer past ``max_chunk_size`` characters the
    buffer is emitted and a new one starts with that sentence. A single
    sentence longer than the limit becomes its own oversized chunk; it is
    never truncated.

    Args:
        text: Document text.
        max_chunk_size: Maximum chunk length in characters (must be positive).
        terminators: Characters that end a sentence.

    Returns:
        List of chunks, each stripped of surrounding whitespace.

    Raises:
        ValueError: If max_chunk_size is not positive.
    """
    if max_chunk_size <= 0:
        raise ValueError("max_chunk_size must be positive")

    if not text or not text.strip():
        return []

    chunks: list[str] = []
    buffer = ""
    for sentence in split_sentences(text, terminators):
        if not sentence.strip():
            buffer += sentence
            continue
        candidate = (buffer + sentence).strip()
        if len(candidate) > max_chunk_size and buffer.strip():
            chunks.append(buffer.strip())
            buffer = sentence
        else:
            buffer += sentence

    if buffer.strip():
        chunks.append(buffer.strip())
    return chunks


def cosine_similarity(a: Sequence[float] | None, b: Sequence[float] | None) -> float:
    """Cosine similarity of two vectors.

    Returns 0.0 instead of raising when either vector is missing, empty,
    of a different length, or has zero norm.
    """
    if a is None or b is None or len(a) == 0 or len(a) != len(b):
        return 0.0

    vec_a = np.asarray(a, dtype=float)
    vec_b = np.asarray(b, dtype=float)
    norm_a = float(np.linalg.norm(vec_a))
    norm_b = float(np.linalg.norm(vec_b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    score = float(np.dot(vec_a, vec_b) / (norm_a * norm_b))
    # Rounding can push identical vectors a hair past 1.0
    return max(-1.0, min(1.0, score))
