import re
from typing import Iterable, List

from clovet.domain.models.suggestion import SuggestionResult
from clovet.domain.models.wardrobe import WardrobeFeatureAnalysis
from clovet.domain.services.constants import COLOR_COMPLEMENTS, MAX_QUERIES
from clovet.utils.dedupe import dedupe_by

_NON_WORD_RE = re.compile(r"[^\w\s]")


def complementary_colors(colors: Iterable[str]) -> List[str]:
    """Complement of each colour that has one; others are skipped."""
    return [COLOR_COMPLEMENTS[c] for c in colors if c in COLOR_COMPLEMENTS]


def fallback_queries(analysis: WardrobeFeatureAnalysis) -> List[str]:
    """
    Rule-based search phrases derived from the wardrobe analysis:
    colour x category, each brand, each style + "clothing",
    then one accessory search per complementary colour.
    """
    queries: List[str] = []
    for color in analysis.colors:
        for category in analysis.categories:
            queries.append(f"{color.lower()} {category.lower()}")
    queries.extend(brand.lower() for brand in analysis.brands)
    queries.extend(f"{style.lower()} clothing" for style in analysis.styles)
    queries.extend(f"{c.lower()} accessories" for c in complementary_colors(analysis.colors))
    return queries


def _keywords(text: str) -> str:
    words = _NON_WORD_RE.sub("", text.lower()).split(" ")
    return " ".join([w for w in words if len(w) > 3][:2])


def queries_from_suggestion(suggestion: SuggestionResult, max_queries: int = MAX_QUERIES) -> List[str]:
    """
    Flatten a stylist suggestion into search phrases:
    suggested queries first, then missing pieces, then two keywords per recommendation.
    """
    candidates = [
        *suggestion.search_queries,
        *(piece.lower() for piece in suggestion.missing_pieces),
        *(_keywords(rec) for rec in suggestion.recommendations),
    ]
    cleaned = [q.strip() for q in candidates if q and q.strip()]
    return dedupe_by(cleaned, key=lambda q: q)[:max_queries]
