"""Carousell adapter: query sanitization, listing transform, caching and fallbacks."""
import httpx
import pytest

from clovet.domain.services.marketplace_svc import (
    CarousellMarketplace,
    MarketplaceError,
    mock_results,
    parse_price,
    sanitize_query,
    transform_listing,
    transform_listings,
)

from fakes import FakeClock


LISTING = {
    "id": "123",
    "listingID": 987654,
    "title": "Zara black leather jacket",
    "price": "S$1,200",
    "media": [{"photoItem": {"url": "https://img.example/jacket.jpg"}}],
    "seller": {"username": "closet_queen"},
    "belowFold": [
        {"component": "paragraph", "stringContent": "Genuine leather, worn twice"},
        {"component": "text", "stringContent": "Size: M"},
        {"component": "text", "stringContent": "Like new condition"},
    ],
    "aboveFold": [{"timestampContent": {"seconds": {"low": 1700000000}}}],
}


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="https://carousell.example")


# ---- sanitize_query ---------------------------------------------------------

def test_sanitize_collapses_whitespace_and_strips_markdown() -> None:
    assert sanitize_query("**Black**  blazer:\n\n_vintage_") == "Black blazer vintage"


def test_sanitize_truncates_on_word_boundary() -> None:
    long_query = " ".join(["cashmere"] * 30)

    s = sanitize_query(long_query)

    assert len(s) <= 100
    assert s.split(" ") == ["cashmere"] * len(s.split(" "))


def test_sanitize_keeps_hard_cut_when_no_late_space() -> None:
    s = sanitize_query("x" * 150)

    assert s == "x" * 100


def test_sanitize_empty() -> None:
    assert sanitize_query("") == ""
    assert sanitize_query("  \n ") == ""


# ---- transform --------------------------------------------------------------

def test_parse_price_handles_currency_and_thousands() -> None:
    assert parse_price("S$1,200") == (1200.0, "SGD")
    assert parse_price("$35.50") == (35.5, "USD")
    assert parse_price(None) == (0.0, "USD")


def test_transform_listing_maps_fields() -> None:
    p = transform_listing(LISTING)

    assert p.id == "123"
    assert p.name == "Zara black leather jacket"
    assert p.price == 1200.0
    assert p.currency == "SGD"
    assert p.platform == "Carousell"
    assert p.url == "https://carousell.com/p/987654"
    assert p.image_url == "https://img.example/jacket.jpg"
    assert p.seller == "closet_queen"
    assert p.brand == "Zara"
    assert p.category == "Outerwear"
    assert p.color == "Black"
    assert p.material == "Leather"
    assert p.size == "Size: M"
    assert p.condition == "Like new condition"
    assert p.posted_date == "2023-11-14"


def test_transform_listings_drops_untitled_and_non_lists() -> None:
    assert transform_listings({"error": "nope"}) == []
    assert [p.id for p in transform_listings([LISTING, {"id": "x"}, "junk"])] == ["123"]


def test_mock_results_are_stable_per_keyword() -> None:
    first = mock_results("denim jacket")
    second = mock_results("denim jacket")

    assert len(first) == 50
    assert first == second
    assert len({p.id for p in first}) == 50
    assert all(p.platform == "Carousell" and p.category == "Outerwear" for p in first)
    assert mock_results("   ") == []


# ---- adapter ----------------------------------------------------------------

async def test_search_calls_api_with_sanitized_keyword_and_caches(settings) -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=[LISTING])

    clock = FakeClock()
    market = CarousellMarketplace(settings, client=_client(handler), clock=clock)

    first = await market.search("leather **jacket**")
    second = await market.search("Leather  jacket")

    assert [p.id for p in first] == ["123"]
    assert second == first
    assert len(calls) == 1
    assert calls[0].url.params["keyword"] == "leather jacket"
    assert calls[0].url.params["country"] == "sg"
    assert calls[0].headers["x-rapidapi-key"] == "test-key"

    clock.advance(5 * 60)
    await market.search("leather jacket")
    assert len(calls) == 2


async def test_search_falls_back_to_mock_on_quota(settings) -> None:
    market = CarousellMarketplace(settings, client=_client(lambda r: httpx.Response(429)))

    results = await market.search("white sneakers")

    assert results == mock_results("white sneakers")


async def test_search_raises_when_mock_fallback_disabled(settings) -> None:
    strict = settings.model_copy(update={"marketplace_mock_fallback": False})
    market = CarousellMarketplace(strict, client=_client(lambda r: httpx.Response(500)))

    with pytest.raises(MarketplaceError):
        await market.search("white sneakers")


async def test_unconfigured_marketplace_serves_mock_without_network(settings) -> None:
    def handler(request):
        raise AssertionError("no network expected")

    market = CarousellMarketplace(settings.model_copy(update={"RAPIDAPI_KEY": ""}), client=_client(handler))

    results = await market.search("silk scarf")

    assert len(results) == 50


async def test_get_product_finds_cached_listing(settings) -> None:
    market = CarousellMarketplace(settings, client=_client(lambda r: httpx.Response(200, json=[LISTING])))
    await market.search("jacket")

    assert market.get_product("123").name == "Zara black leather jacket"
    assert market.get_product("missing") is None

    market.clear_cache()
    assert market.get_product("123") is None
