"""Multilingual text normalization shared by every matcher."""

from __future__ import annotations

import re
import unicodedata
from functools import lru_cache
from typing import List

_ARABIC_DIACRITICS_RE = re.compile(r"[\u0610-\u061A\u064B-\u065F\u0670\u06D6-\u06ED]")
_SPACE_RE = re.compile(r"\s+")
_WORD_RE = re.compile(r"\w+")

_ARABIC_FOLD = str.maketrans(
    {
        "أ": "ا",
        "إ": "ا",
        "آ": "ا",
        "ٱ": "ا",
        "ى": "ي",
        "ة": "ه",
        "ؤ": "و",
        "ئ": "ي",
        "ـ": "",
    }
)

_FRENCH_FOLD = str.maketrans(
    {
        "é": "e",
        "è": "e",
        "ê": "e",
        "ë": "e",
        "à": "a",
        "â": "a",
        "ä": "a",
        "ù": "u",
        "û": "u",
        "ü": "u",
        "ï": "i",
        "î": "i",
        "ô": "o",
        "ö": "o",
        "ç": "c",
        "œ": "oe",
        "æ": "ae",
    }
)


@lru_cache(maxsize=8192)
def normalize(text: str) -> str:
    """Normalize mixed Arabic/French/English text into a comparable form."""
    if not text:
        return ""
    # NFC first so decomposed accents fold the same way as precomposed ones.
    normalized = unicodedata.normalize("NFC", text.lower()).strip()
    normalized = _ARABIC_DIACRITICS_RE.sub("", normalized).translate(_ARABIC_FOLD)
    # dropping tatweel or tashkeel can leave a letter next to a combining accent
    normalized = unicodedata.normalize("NFC", normalized).translate(_FRENCH_FOLD)
    return _SPACE_RE.sub(" ", normalized).strip()


def tokenize(text: str) -> List[str]:
    """Split text into normalized word tokens, dropping punctuation."""
    return _WORD_RE.findall(normalize(text))
