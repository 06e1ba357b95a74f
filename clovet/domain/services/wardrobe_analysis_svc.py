import logging
from collections import Counter
from typing import Iterable, List, Optional

from clovet.domain.models.wardrobe import WardrobeFeatureAnalysis
from clovet.domain.services.constants import TOP_FEATURES

logger = logging.getLogger(__name__)


def _top(values: Iterable[Optional[str]], k: int = TOP_FEATURES) -> List[str]:
    # Counter keeps first-seen order and most_common sorts stably,
    # so ties stay in first-occurrence order.
    counts = Counter(v for v in values if v)
    return [v for v, _ in counts.most_common(k)]


def analyze(items) -> WardrobeFeatureAnalysis:
    """
    Reduce a wardrobe to its dominant colours, categories and brands.

    - Empty wardrobe: default analysis.
    - Empty colour/category tallies fall back to the defaults individually;
      brands may stay empty.
    - Unreadable input never raises; it is logged and the defaults returned.
    """
    try:
        items = list(items or [])
        if not items:
            return WardrobeFeatureAnalysis.default()

        colors = _top(getattr(it, "color", None) for it in items)
        categories = _top(getattr(it, "category", None) for it in items)
        brands = _top(getattr(it, "brand", None) for it in items)

        default = WardrobeFeatureAnalysis.default()
        return WardrobeFeatureAnalysis(
            colors=colors or default.colors,
            categories=categories or default.categories,
            brands=brands,
        )
    except Exception as e:
        logger.error(f"Wardrobe analysis failed, using defaults: {e}")
        return WardrobeFeatureAnalysis.default()
