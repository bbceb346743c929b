"""Title normalization for duplicate-discussion matching.

Normalized titles are only ever compared, never displayed.
"""

import re
import unicodedata

# \w covers Unicode letters and digits plus "_", which counts as punctuation here
_PUNCTUATION = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")


def normalize_title(title: str) -> str:
    """Canonicalize a movie title for comparison.

    - NFC normalize, so precomposed and decomposed accents compare equal
    - Case fold (locale independent)
    - Drop everything that is not a letter, digit or whitespace
    - Collapse whitespace runs to a single space
    - Trim, then NFC again for letters brought together by removed punctuation

    >>> normalize_title("Spider-Man: No Way Home!")
    'spiderman no way home'
    """
    title = unicodedata.normalize("NFC", title).casefold()
    title = _PUNCTUATION.sub("", title)
    title = _WHITESPACE.sub(" ", title)
    return unicodedata.normalize("NFC", title.strip())
