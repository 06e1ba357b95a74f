"""
Pytest configuration and shared fixtures.
"""
import os

# Settings are read at import time by clovet.main; keep tests off real services.
os.environ.setdefault("APP_ENV", "development")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGO_DB", "clovet_test")
os.environ.setdefault("DISABLE_EXTERNAL_API", "true")

import pytest

from clovet.core.config import Settings
from clovet.domain.models.wardrobe import WardrobeItem
from clovet.domain.repositories.reco_cache_repo import RecoCacheRepo
from clovet.domain.services.recommendation_svc import Recommender

from fakes import FakeClock, FakeMarketplace, FakeSuggester, FakeWardrobeRepo


@pytest.fixture
def settings() -> Settings:
    return Settings(
        DEBUG=False,
        MONGO_URI="mongodb://localhost:27017",
        MONGO_DB="clovet_test",
        RAPIDAPI_KEY="test-key",
        RAPIDAPI_HOST="carousell.example",
        OPENAI_API_KEY="sk-test",
        DISABLE_EXTERNAL_API=False,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def wardrobe_items() -> list[WardrobeItem]:
    return [
        WardrobeItem(id="w1", user_id="u1", name="Black Tee", category="Tops", color="Black", brand="Uniqlo"),
        WardrobeItem(id="w2", user_id="u1", name="Black Shirt", category="Tops", color="Black"),
        WardrobeItem(id="w3", user_id="u1", name="Blue Jeans", category="Bottoms", color="Blue", brand="Levi's",
                     purchase_price=45),
    ]


@pytest.fixture
def wardrobe_repo(wardrobe_items) -> FakeWardrobeRepo:
    return FakeWardrobeRepo({"u1": wardrobe_items})


@pytest.fixture
def marketplace() -> FakeMarketplace:
    return FakeMarketplace()


@pytest.fixture
def suggester() -> FakeSuggester:
    return FakeSuggester()


@pytest.fixture
def reco_cache(clock) -> RecoCacheRepo:
    return RecoCacheRepo(ttl=3600, clock=clock)


@pytest.fixture
def recommender(wardrobe_repo, suggester, marketplace, reco_cache) -> Recommender:
    return Recommender(
        wardrobe_repo=wardrobe_repo,
        suggester=suggester,
        marketplace=marketplace,
        cache=reco_cache,
    )
