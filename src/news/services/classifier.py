"""
Content classification for ingested candidates.

Adapters fetch per category, so the category is bound from the fetch rather
than inferred. Articles can additionally be required to mention a technology
keyword in their title or description.
"""

from typing import Optional

from ..categories import parse_category
from .sources.base import Candidate
from ...exceptions import ClassificationSkip, InvalidCategory
from ...repositories.content_repository import EntityKind

TECH_KEYWORDS = (
    "technology",
    "tech",
    "software",
    "hardware",
    "ai",
    "artificial intelligence",
    "machine learning",
    "blockchain",
    "cryptocurrency",
    "cybersecurity",
    "robotics",
    "virtual reality",
    "augmented reality",
    "iot",
    "internet of things",
    "cloud computing",
    "data science",
    "big data",
    "programming",
    "coding",
    "developer",
    "startup",
    "5g",
    "quantum computing",
    "fintech",
    "biotech",
    "nanotech",
    "space tech",
)


def is_tech_relevant(title: Optional[str], description: Optional[str] = None) -> bool:
    """Case-insensitive substring match of any keyword against title or description."""
    lowered_title = (title or "").lower()
    lowered_description = (description or "").lower()
    return any(
        keyword in lowered_title or keyword in lowered_description
        for keyword in TECH_KEYWORDS
    )


class ContentClassifier:
    def __init__(self, keyword_filter_enabled: bool = True):
        self.keyword_filter_enabled = keyword_filter_enabled

    def classify(self, candidate: Candidate, fetched_category) -> Candidate:
        if not candidate.title or not candidate.title.strip():
            raise ClassificationSkip("candidate has no title")

        try:
            category = parse_category(fetched_category)
        except InvalidCategory:
            raise ClassificationSkip(f"fetched under unknown category {fetched_category!r}") from None

        if candidate.category and candidate.category != category.value:
            raise ClassificationSkip(
                f"candidate category {candidate.category!r} does not match fetch category {category.value!r}"
            )
        candidate.category = category.value

        if (
            self.keyword_filter_enabled
            and candidate.kind is EntityKind.ARTICLE
            and not is_tech_relevant(candidate.title, candidate.description)
        ):
            raise ClassificationSkip("article does not mention a technology keyword")

        return candidate
