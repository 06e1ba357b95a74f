# clovet/domain/services/marketplace_svc.py

from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional
import logging
import random
import re
import time
import uuid
from urllib.parse import quote

import httpx

from clovet.core.config import Settings
from clovet.domain.models.product import UnifiedProduct
from clovet.domain.services.constants import MAX_QUERY_LENGTH, MIN_WORD_CUT, PLATFORM_CAROUSELL
from clovet.utils.cache import TTLCache

logger = logging.getLogger(__name__)

# Status codes that mean "quota or credentials", served from mock listings
_MOCK_STATUSES = {401, 403, 429}


class MarketplaceError(Exception):
    """Marketplace search failed and no mock fallback was allowed."""


# =============================================================================
#                               QUERY SANITIZATION
# =============================================================================

_NEWLINES_RE = re.compile(r"[\n\r]+")
_MARKDOWN_RE = re.compile(r"[*_~`<>]")
_COLON_RE = re.compile(r":\s*")
_SPACES_RE = re.compile(r"\s+")


def sanitize_query(q: str, max_len: int = MAX_QUERY_LENGTH) -> str:
    """
    Make a free-text phrase safe for the search endpoint:
    newlines, markdown markers and colons become spaces, whitespace collapses,
    and long phrases are cut back to a word boundary.
    """
    if not q:
        return ""
    s = _NEWLINES_RE.sub(" ", q)
    s = _MARKDOWN_RE.sub(" ", s)
    s = _COLON_RE.sub(" ", s)
    s = _SPACES_RE.sub(" ", s).strip()

    if len(s) > max_len:
        s = s[:max_len]
        last_space = s.rfind(" ")
        if last_space > MIN_WORD_CUT:
            s = s[:last_space]
    return s


# =============================================================================
#                               LISTING TRANSFORM
# =============================================================================

BRANDS = [
    "Armani", "Exchange", "COS", "HAV", "Mazie", "Nike", "Adidas", "Zara", "H&M",
    "Uniqlo", "Levi's", "Gucci", "Prada", "Topshop", "ASOS",
]
CATEGORY_KEYWORDS = {
    "jacket": "Outerwear",
    "blazer": "Outerwear",
    "coat": "Outerwear",
    "sweater": "Knitwear",
    "jumper": "Knitwear",
    "shirt": "Tops",
    "blouse": "Tops",
    "tee": "Tops",
    "dress": "Dresses",
    "pants": "Bottoms",
    "jeans": "Bottoms",
    "trousers": "Bottoms",
    "skirt": "Bottoms",
}
COLORS = [
    "black", "white", "red", "blue", "green", "yellow", "purple", "pink", "brown",
    "gray", "grey", "navy", "cream", "beige", "khaki",
]
MATERIALS = ["leather", "cotton", "wool", "silk", "polyester", "denim", "linen", "cashmere", "satin", "velvet"]

_PRICE_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")


def extract_brand(title: str) -> str:
    low = title.lower()
    return next((b for b in BRANDS if b.lower() in low), "Unknown Brand")


def categorize(title: str) -> str:
    low = title.lower()
    return next((cat for kw, cat in CATEGORY_KEYWORDS.items() if kw in low), "Clothing")


def extract_color(text: str) -> Optional[str]:
    low = text.lower()
    return next((c.capitalize() for c in COLORS if c in low), None)


def extract_material(text: str) -> Optional[str]:
    low = text.lower()
    return next((m.capitalize() for m in MATERIALS if m in low), None)


def parse_price(raw: Any) -> tuple[float, str]:
    """'S$1,200' -> (1200.0, 'SGD'); anything unparseable is a zero price."""
    text = str(raw or "")
    currency = "SGD" if text.startswith("S$") else "USD"
    m = _PRICE_RE.search(text)
    if not m:
        return 0.0, currency
    return float(m.group(0).replace(",", "")), currency


def _fold_text(listing: dict, predicate: Callable[[str], bool]) -> Optional[str]:
    for fold in listing.get("belowFold") or []:
        content = (fold or {}).get("stringContent") or ""
        if content and predicate(content.lower()):
            return content
    return None


def _posted_date(listing: dict) -> str:
    try:
        seconds = listing["aboveFold"][0]["timestampContent"]["seconds"]["low"]
        return datetime.fromtimestamp(int(seconds), tz=timezone.utc).date().isoformat()
    except (KeyError, IndexError, TypeError, ValueError):
        return datetime.now(timezone.utc).date().isoformat()


def transform_listing(listing: dict) -> Optional[UnifiedProduct]:
    title = listing.get("title")
    if not title:
        return None

    price, currency = parse_price(listing.get("price"))
    media = listing.get("media") or [{}]
    image_url = ((media[0] or {}).get("photoItem") or {}).get("url") or listing.get("thumbnailURL") or ""
    description = next(
        (f.get("stringContent") for f in listing.get("belowFold") or [] if (f or {}).get("component") == "paragraph"),
        None,
    ) or ""
    size = _fold_text(listing, lambda s: any(k in s for k in ("size:", "eu ", "uk ", "us ")))
    condition = _fold_text(listing, lambda s: "condition" in s or "new" in s or "used" in s)
    seller = listing.get("seller") or {}
    listing_id = listing.get("listingID")

    return UnifiedProduct(
        id=str(listing.get("id") or listing_id or uuid.uuid4().hex),
        name=title,
        price=price,
        currency=currency,
        platform=PLATFORM_CAROUSELL,
        image_url=image_url,
        url=f"https://carousell.com/p/{listing_id}" if listing_id else None,
        seller=seller.get("username") or seller.get("firstName") or "Unknown Seller",
        description=description,
        condition=condition or "Good",
        size=size or "One Size",
        brand=extract_brand(title),
        posted_date=_posted_date(listing),
        category=categorize(title),
        color=extract_color(title),
        material=extract_material(description),
    )


def transform_listings(payload: Any) -> List[UnifiedProduct]:
    if not isinstance(payload, list):
        logger.warning(f"Expected a list of listings, got {type(payload).__name__}")
        return []
    out: List[UnifiedProduct] = []
    for listing in payload:
        if not isinstance(listing, dict):
            continue
        product = transform_listing(listing)
        if product is not None:
            out.append(product)
    return out


# =============================================================================
#                               MOCK LISTINGS
# =============================================================================

_IMAGE_POOLS = {
    "jacket": [
        "https://images.pexels.com/photos/1124468/pexels-photo-1124468.jpeg?auto=compress&cs=tinysrgb&w=800",
        "https://images.pexels.com/photos/1040424/pexels-photo-1040424.jpeg?auto=compress&cs=tinysrgb&w=800",
        "https://images.pexels.com/photos/1381556/pexels-photo-1381556.jpeg?auto=compress&cs=tinysrgb&w=800",
    ],
    "dress": [
        "https://images.pexels.com/photos/902030/pexels-photo-902030.jpeg?auto=compress&cs=tinysrgb&w=800",
        "https://images.pexels.com/photos/2235071/pexels-photo-2235071.jpeg?auto=compress&cs=tinysrgb&w=800",
    ],
    "bottoms": [
        "https://images.pexels.com/photos/4210866/pexels-photo-4210866.jpeg?auto=compress&cs=tinysrgb&w=800",
        "https://images.pexels.com/photos/1082529/pexels-photo-1082529.jpeg?auto=compress&cs=tinysrgb&w=800",
    ],
    "top": [
        "https://images.pexels.com/photos/6311392/pexels-photo-6311392.jpeg?auto=compress&cs=tinysrgb&w=800",
        "https://images.pexels.com/photos/1656684/pexels-photo-1656684.jpeg?auto=compress&cs=tinysrgb&w=800",
    ],
    "default": [
        "https://images.pexels.com/photos/996329/pexels-photo-996329.jpeg?auto=compress&cs=tinysrgb&w=800",
        "https://images.pexels.com/photos/325876/pexels-photo-325876.jpeg?auto=compress&cs=tinysrgb&w=800",
    ],
}
_IMAGE_KEYWORDS = [
    (("jacket", "coat", "blazer"), "jacket"),
    (("dress", "gown"), "dress"),
    (("jeans", "denim", "pant", "trouser", "skirt"), "bottoms"),
    (("top", "shirt", "blouse"), "top"),
]
_MOCK_BRANDS = [
    "Zara", "H&M", "Uniqlo", "Vintage", "Love Bonito", "Cotton On", "Nike", "Adidas",
    "Levi's", "Topshop", "ASOS", "Mango", "Pull&Bear",
]
_MOCK_CONDITIONS = ["New", "Like New", "Good", "Used"]
_MOCK_SIZES = ["XS", "S", "M", "L", "XL"]
_MOCK_COLORS = ["Black", "White", "Blue", "Beige", "Navy"]
MOCK_RESULT_COUNT = 50


def mock_results(keyword: str, count: int = MOCK_RESULT_COUNT) -> List[UnifiedProduct]:
    """
    Plausible listings for a keyword when the live API can't be used.
    Seeded by the keyword so the same search yields the same listings.
    """
    keyword = (keyword or "").strip()
    if not keyword:
        return []
    low = keyword.lower()
    pool = next((p for kws, p in _IMAGE_KEYWORDS if any(k in low for k in kws)), "default")
    images = _IMAGE_POOLS[pool]
    rng = random.Random(low)
    title = keyword[0].upper() + keyword[1:]
    slug = re.sub(r"\W+", "-", low).strip("-")
    today = datetime.now(timezone.utc).date().isoformat()

    out: List[UnifiedProduct] = []
    for i in range(count):
        brand = rng.choice(_MOCK_BRANDS)
        condition = rng.choice(_MOCK_CONDITIONS)
        out.append(UnifiedProduct(
            id=f"mock-{slug}-{i}",
            name=f"{brand} {title}",
            price=float(rng.randint(20, 169)),
            currency="SGD",
            platform=PLATFORM_CAROUSELL,
            image_url=images[i % len(images)],
            url=f"https://www.carousell.sg/search/{quote(keyword)}",
            seller=f"Seller_{rng.randint(0, 999)}",
            description=f"A beautiful {keyword} in {condition.lower()} condition. Perfect for your wardrobe!",
            condition=condition,
            size=rng.choice(_MOCK_SIZES),
            brand=brand,
            posted_date=today,
            category=categorize(keyword),
            color=extract_color(keyword) or rng.choice(_MOCK_COLORS),
            material=extract_material(keyword) or "Cotton",
        ))
    return out


# =============================================================================
#                               ADAPTER
# =============================================================================

class CarousellMarketplace:
    """
    Carousell keyword search through RapidAPI.

    Results are cached per (keyword, country) for `marketplace_cache_ttl`
    seconds, mock listings included, so repeated searches stay off the wire.
    """
    platform = PLATFORM_CAROUSELL

    def __init__(
        self,
        settings: Settings,
        client: Optional[httpx.AsyncClient] = None,
        *,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self._client = client
        self._owns_client = client is None
        self.cache: TTLCache[List[UnifiedProduct]] = TTLCache(settings.marketplace_cache_ttl, clock=clock)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=f"https://{self.settings.RAPIDAPI_HOST}",
                timeout=self.settings.marketplace_timeout_s,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def cache_key(keyword: str, country: str) -> str:
        return f"{sanitize_query(keyword).lower()}-{country.lower()}"

    def _remember(self, key: str, items: List[UnifiedProduct]) -> List[UnifiedProduct]:
        self.cache.set(key, items)
        return items

    async def _fetch(self, keyword: str, country: str) -> List[UnifiedProduct]:
        resp = await self._get_client().get(
            "/searchByKeyword",
            params={"keyword": keyword, "country": country, "count": self.settings.marketplace_page_size},
            headers={
                "x-rapidapi-host": self.settings.RAPIDAPI_HOST,
                "x-rapidapi-key": self.settings.RAPIDAPI_KEY,
            },
        )
        resp.raise_for_status()
        return transform_listings(resp.json())

    async def search(self, keyword: str, country: Optional[str] = None) -> List[UnifiedProduct]:
        country = country or self.settings.marketplace_country
        key = self.cache_key(keyword, country)
        if (cached := self.cache.get(key)) is not None:
            logger.info(f"Marketplace cache hit keyword={keyword!r} country={country}")
            return cached

        sanitized = sanitize_query(keyword)
        if not sanitized:
            return []

        if not self.settings.marketplace_configured or self.settings.DISABLE_EXTERNAL_API:
            logger.info(f"Marketplace not reachable (unconfigured or disabled), mock results for {sanitized!r}")
            return self._remember(key, mock_results(sanitized))

        try:
            logger.info(f"Fetching marketplace results keyword={sanitized!r} country={country}")
            return self._remember(key, await self._fetch(sanitized, country))
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status in _MOCK_STATUSES:
                logger.warning(f"Marketplace limit reached or auth failed ({status}), mock results")
                return self._remember(key, mock_results(sanitized))
            if not self.settings.marketplace_mock_fallback:
                raise MarketplaceError(f"Marketplace returned {status} for {sanitized!r}") from e
            logger.error(f"Marketplace returned {status} for {sanitized!r}, mock results")
        except (httpx.HTTPError, ValueError) as e:
            if not self.settings.marketplace_mock_fallback:
                raise MarketplaceError(f"Marketplace search failed for {sanitized!r}: {e}") from e
            logger.error(f"Marketplace search failed for {sanitized!r}: {e}, mock results")
        return self._remember(key, mock_results(sanitized))

    def get_product(self, product_id: str) -> Optional[UnifiedProduct]:
        """Look a listing up among fresh cached search results."""
        for items in self.cache.values():
            for item in items:
                if item.id == product_id:
                    return item
        return None

    def clear_cache(self) -> None:
        self.cache.clear()
