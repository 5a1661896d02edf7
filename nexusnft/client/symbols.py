"""
Collection symbol generation.

Derives a short ticker-style symbol (at most four characters) from a
collection name so users only have to pick a name.
"""

import re

DEFAULT_SYMBOL = "NFT"
MAX_SYMBOL_LENGTH = 4

_PUNCTUATION = re.compile(r"[^\w\s]", re.ASCII)
_VOWELS = re.compile(r"[AEIOU]")


def generate_symbol(name: str) -> str:
    """
    Generate a symbol for a collection name.

    - Several words: their initials, e.g. "Nexus Test Collection" -> "NTC"
    - One short word: the word itself, upper-cased
    - One long word: its first consonants when it has at least three,
      otherwise its first letters

    Examples:
        >>> generate_symbol("MyNFT")
        'MYNF'
        >>> generate_symbol("Galaxy")
        'GLXY'
    """
    words = _PUNCTUATION.sub("", name).split()
    if not words:
        return DEFAULT_SYMBOL

    if len(words) == 1:
        word = words[0].upper()
        if len(word) <= MAX_SYMBOL_LENGTH:
            return word
        consonants = _VOWELS.sub("", word)
        if len(consonants) >= 3:
            return consonants[:MAX_SYMBOL_LENGTH]
        return word[:MAX_SYMBOL_LENGTH]

    return "".join(word[0].upper() for word in words)[:MAX_SYMBOL_LENGTH]
