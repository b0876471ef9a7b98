#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import functools
import re

CHOSUNG = (
    "ㄱ", "ㄲ", "ㄴ", "ㄷ", "ㄸ", "ㄹ", "ㅁ", "ㅂ", "ㅃ", "ㅅ",
    "ㅆ", "ㅇ", "ㅈ", "ㅉ", "ㅊ", "ㅋ", "ㅌ", "ㅍ", "ㅎ",
)
HANGUL_BASE = 0xAC00
HANGUL_COUNT = 11172
# 21 medial vowels x 28 finals per initial consonant
SYLLABLES_PER_INITIAL = 588

HANGUL_QUERY_RE = re.compile(r"[ㄱ-ㅎ가-힣]")
WHITESPACE_RE = re.compile(r"\s+")


@functools.lru_cache(maxsize=4096)
def get_chosung(text: str) -> str:
    """Replace each Hangul syllable by its initial consonant."""
    out = []
    for ch in text:
        code = ord(ch) - HANGUL_BASE
        if 0 <= code < HANGUL_COUNT:
            out.append(CHOSUNG[code // SYLLABLES_PER_INITIAL])
        else:
            out.append(ch)
    return "".join(out)


def match_search(text: str, query: str) -> bool:
    if not text or not query:
        return False

    lower_text = text.lower()
    lower_query = query.lower()
    if lower_query in lower_text:
        return True

    squeezed_query = WHITESPACE_RE.sub("", lower_query)
    if squeezed_query and squeezed_query in WHITESPACE_RE.sub("", lower_text):
        return True

    if HANGUL_QUERY_RE.search(query):
        return get_chosung(query) in get_chosung(text)

    return False
