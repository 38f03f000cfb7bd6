"""Text helpers applied at the knowledge base boundaries.

Uploaded documents and queries have BOM markers and replacement
characters removed before chunking or embedding, so chunk identities and
vectors do not depend on invisible bytes. Normalization is NFC only: the
source material mixes CJK and Latin scripts and NFKC would fold full-width
punctuation that the chunker treats as sentence boundaries.
"""

import unicodedata


def clean_text(text: str, *, normalize: bool = True) -> str:
    """Remove BOM markers and optionally apply NFC normalization.

    Args:
        text: Input text that may contain BOM or replacement characters.
        normalize: Whether to apply NFC normalization.

    Returns:
        Cleaned text.
    """
    if not text:
        return ""

    cleaned = text.replace("\ufeff", "").replace("\ufffd", "")
    if normalize:
        cleaned = unicodedata.normalize("NFC", cleaned)
    return cleaned


def normalize_query(query: str) -> str:
    """Clean a search query and collapse runs of whitespace."""
    return " ".join(clean_text(query).split())
