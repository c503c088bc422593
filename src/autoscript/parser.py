"""
Structured response parsers.

A parser splits one free-text completion into N named sections using an
ordered list of N-1 literal sentinel delimiters, failing closed when a
delimiter is missing.
"""

import re
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from .errors import MissingDelimiter


class Parser(ABC):
    """Interface for splitting a response into ordered sections."""

    @abstractmethod
    def locate(self, text: str, delimiter: str) -> Optional[Tuple[int, int]]:
        """Returns the ``(start, end)`` span of ``delimiter`` in ``text``, or None."""
        pass

    def parse(self, raw_text: str, delimiters: Sequence[str]) -> List[str]:
        """Splits ``raw_text`` into ``len(delimiters) + 1`` trimmed sections.

        Consumes one delimiter at a time: everything before it is a section,
        everything after it is searched for the next delimiter. The text left
        once every delimiter is consumed is the final section.

        Raises
        ------
        MissingDelimiter
            If a delimiter does not occur in the remaining text.
        """
        sections = []
        remainder = raw_text
        for delimiter in delimiters:
            span = self.locate(remainder, delimiter)
            if span is None:
                raise MissingDelimiter(delimiter)
            start, end = span
            sections.append(remainder[:start].strip())
            remainder = remainder[end:]
        sections.append(remainder.strip())
        return sections


class Sentinel(Parser):
    """Splits on the first occurrence of each delimiter, anywhere in the text.

    A delimiter that happens to appear inside generated content is taken as
    the section boundary.
    """

    def locate(self, text, delimiter):
        start = text.find(delimiter)
        if start < 0:
            return None
        return start, start + len(delimiter)


class LineAnchored(Parser):
    """Only accepts a delimiter standing alone on its own line."""

    def locate(self, text, delimiter):
        pattern = re.compile(rf"^[ \t]*{re.escape(delimiter)}[ \t]*\r?$", re.MULTILINE)
        match = pattern.search(text)
        if match is None:
            return None
        return match.start(), match.end()
