"""Protect inline Discord tags from the translation provider.

Mentions (``<@123>``), role and channel references (``<@&1>``, ``<#1>``) and
custom emotes (``<:name:1>``) must come back from a translation untouched.
:meth:`TagTranscoder.encode` swaps each of them for a short placeholder that
is itself a valid tag (``<:0>``, ``<:1>``, ...), and
:meth:`TagTranscoder.decode` swaps them back after translation.

Usage::

    encoded, table = TagTranscoder.encode("hello <@123> world")
    # encoded == "hello <:0> world", table == {"<:0>": "<@123>"}
    translated = await translator.translate(encoded, "EN", "DE")
    text = TagTranscoder.decode(translated, table)

A tag table belongs to exactly one translate call.  Never share one across
messages.
"""

from __future__ import annotations

import logging
import re
from typing import Final

log = logging.getLogger(__name__)

TagTable = dict[str, str]
"""Mapping ``placeholder -> original tag``."""

TAG_PATTERN: Final[re.Pattern[str]] = re.compile(r"<(?:@[!&]?|#|a?:)(?:[\w~]+:)?[\d:]*>")


class TagTranscoder:
    """Stateless encoder/decoder for protected inline tags."""

    @staticmethod
    def placeholder(index: int) -> str:
        return f"<:{index}>"

    @staticmethod
    def encode(text: str) -> tuple[str, TagTable]:
        """Replace every protected tag in *text* with a numbered placeholder.

        Returns:
            ``(encoded_text, tag_table)``.  With no tags present the text is
            returned unchanged with an empty table.
        """
        table: TagTable = {}
        parts: list[str] = []
        last = 0
        for counter, match in enumerate(TAG_PATTERN.finditer(text)):
            parts.append(text[last:match.start()])
            key = TagTranscoder.placeholder(counter)
            parts.append(key)
            table[key] = match.group(0)
            last = match.end()
        parts.append(text[last:])
        return "".join(parts), table

    @staticmethod
    def decode(text: str, table: TagTable) -> str:
        """Restore the tags recorded in *table*.

        Any tag-shaped token the table does not know (a placeholder the
        provider mangled or invented) is dropped.
        """
        parts: list[str] = []
        last = 0
        for match in TAG_PATTERN.finditer(text):
            parts.append(text[last:match.start()])
            key = match.group(0)
            original = table.get(key)
            if original is None:
                log.warning("Dropping unknown tag %r from translated text", key)
                original = ""
            parts.append(original)
            last = match.end()
        parts.append(text[last:])
        return "".join(parts)
