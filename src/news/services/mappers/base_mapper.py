"""
Base mapper class for content sources
Turns one raw provider entry into a normalized candidate
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from bs4 import BeautifulSoup

from ....utils.string_utils import clean_text, truncate_text


class BaseMapper(ABC):
    """Base class for source mappers"""

    MAX_TITLE_LENGTH = 500
    MAX_TEXT_LENGTH = 5000

    def __init__(self, source_name: str):
        self.source_name = source_name

    @abstractmethod
    def map_entry(self, raw_data: Any, category: str):
        """
        Map one raw entry to a candidate

        Args:
            raw_data: Provider-specific entry (JSON dict, markup block, ...)
            category: Category the entry was fetched under

        Returns:
            Candidate, or None when the entry cannot be used
        """

    def clean_title(self, title: Optional[str]) -> str:
        if not title:
            return ""
        return truncate_text(clean_text(str(title)), self.MAX_TITLE_LENGTH)

    def clean_content(self, content: Optional[str]) -> Optional[str]:
        """Strip markup and collapse whitespace; empty text becomes None"""
        if not content:
            return None
        text = str(content)
        if "<" in text and ">" in text:
            text = BeautifulSoup(text, "html.parser").get_text(" ")
        text = clean_text(text)
        if not text:
            return None
        return truncate_text(text, self.MAX_TEXT_LENGTH)
