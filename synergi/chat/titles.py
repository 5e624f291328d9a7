"""Conversation title derivation."""

import re

from synergi.storage.models import DEFAULT_TITLE

_CODE_FENCE = re.compile(r"```.*?(?:```|$)", re.DOTALL)
_INLINE_CODE = re.compile(r"`[^`]*`")
_IMAGE = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
_LINK = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_URL = re.compile(r"(?:https?://|www\.)\S+", re.IGNORECASE)
_MARKUP = re.compile(r"[#*_>~|`]+")
_WHITESPACE = re.compile(r"\s+")


def clean_text(text: str) -> str:
    """Strip code, links, URLs and markdown markup, collapsing whitespace."""
    text = _CODE_FENCE.sub(" ", text)
    text = _INLINE_CODE.sub(" ", text)
    text = _IMAGE.sub(r"\1", text)
    text = _LINK.sub(r"\1", text)
    text = _URL.sub(" ", text)
    text = _MARKUP.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def derive_title(text: str, max_words: int = 6, max_chars: int = 60) -> str:
    """
    Short title from the first user message.

    Deterministic: the same text always yields the same title. Never
    empty and never longer than `max_chars`.
    """
    words = clean_text(text).split(" ")
    title = " ".join(w for w in words[:max_words] if w).strip(" ,;:-")

    if not title:
        return DEFAULT_TITLE[:max_chars]

    if len(title) > max_chars:
        title = title[: max(max_chars - 3, 1)].rstrip(" ,;:-") + "..."
        title = title[:max_chars]

    return title[0].upper() + title[1:]
