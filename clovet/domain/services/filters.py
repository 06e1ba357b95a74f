from typing import Iterable, List, Optional

from pydantic import BaseModel

from clovet.domain.models.product import UnifiedProduct
from clovet.domain.services.constants import SCOPE_ALL, SCOPE_FOR_YOU

# Text filters: filter field -> product attribute
TEXT_FILTERS = ("category", "condition", "color", "brand", "size")


class FilterSet(BaseModel):
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    category: Optional[str] = None
    condition: Optional[str] = None
    color: Optional[str] = None
    brand: Optional[str] = None
    size: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return any(
            v is not None and v != ""
            for v in self.model_dump().values()
        )


def _normalize(v: Optional[str]) -> Optional[str]:
    """Lower-cased, trimmed text; None for empty values."""
    if v is None:
        return None
    s = str(v).strip().lower()
    return s or None


def matches(product: UnifiedProduct, filters: FilterSet) -> bool:
    """
    Lenient predicate: a text filter only rejects a product that has the
    attribute and does not contain the filter value (case-insensitive).
    Products missing the attribute are kept.
    """
    if filters.price_min is not None and product.price < filters.price_min:
        return False
    if filters.price_max is not None and product.price > filters.price_max:
        return False

    for field in TEXT_FILTERS:
        wanted = _normalize(getattr(filters, field))
        if wanted is None:
            continue
        have = _normalize(getattr(product, field, None))
        if have is not None and wanted not in have:
            return False
    return True


def apply_filters(products: Iterable[UnifiedProduct], filters: Optional[FilterSet] = None) -> List[UnifiedProduct]:
    """Order-preserving filter; no filters means the input comes back unchanged."""
    products = list(products)
    if filters is None or not filters.is_active:
        return products
    return [p for p in products if matches(p, filters)]


def filter_platform(products: Iterable[UnifiedProduct], platform: Optional[str]) -> List[UnifiedProduct]:
    """Keep one platform's listings; 'All', 'For You' and empty keep everything."""
    products = list(products)
    if not platform or platform in (SCOPE_ALL, SCOPE_FOR_YOU):
        return products
    return [p for p in products if p.platform == platform]
