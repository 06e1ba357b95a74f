"""
In-memory stand-ins for the service's collaborators (Mongo repos, Redis,
marketplace, stylist) used across the test modules.
"""
import asyncio
import itertools
from typing import Dict, List, Optional

from clovet.domain.models.favorite import FavoriteRecord
from clovet.domain.models.product import UnifiedProduct
from clovet.domain.models.suggestion import SuggestionResult
from clovet.domain.models.wardrobe import WardrobeItem


class FakeClock:
    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_product(name: str, price: float = 10.0, platform: str = "Carousell", **kw) -> UnifiedProduct:
    return UnifiedProduct(
        id=kw.pop("id", f"{platform}-{name}-{price}"),
        name=name,
        price=price,
        currency=kw.pop("currency", "SGD"),
        platform=platform,
        image_url=kw.pop("image_url", f"https://img.example/{name}.jpg"),
        **kw,
    )


class FakeMarketplace:
    platform = "Carousell"

    def __init__(self, per_query: int = 6, results: Optional[Dict[str, List[UnifiedProduct]]] = None):
        self.per_query = per_query
        self.results = results or {}
        self.failing: set = set()
        self.delays: Dict[str, float] = {}
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.served: Dict[str, UnifiedProduct] = {}

    async def search(self, keyword: str) -> List[UnifiedProduct]:
        self.calls.append(keyword)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(keyword, 0))
            if keyword in self.failing:
                raise RuntimeError(f"upstream down for {keyword}")
            if keyword in self.results:
                found = list(self.results[keyword])
            else:
                found = [make_product(f"{keyword} #{i}", price=10 + i) for i in range(self.per_query)]
            self.served.update((p.id, p) for p in found)
            return found
        finally:
            self.in_flight -= 1

    def get_product(self, product_id: str) -> Optional[UnifiedProduct]:
        return self.served.get(product_id)


class FakeSuggester:
    def __init__(self, result: Optional[SuggestionResult] = None, error: Optional[Exception] = None):
        self.result = result or SuggestionResult(
            searchQueries=["camel trench coat", "white sneakers"],
            missingPieces=["Leather Belt"],
            recommendations=["A structured blazer for work"],
        )
        self.error = error
        self.calls = 0

    async def suggest(self, analysis, items) -> SuggestionResult:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


class FakeWardrobeRepo:
    def __init__(self, items_by_user: Optional[dict] = None, error: Optional[Exception] = None):
        self.items_by_user = items_by_user or {}
        self.error = error

    async def list_for_user(self, user_id: str):
        if self.error is not None:
            raise self.error
        return list(self.items_by_user.get(user_id, []))

    async def add(self, user_id: str, fields: dict) -> WardrobeItem:
        items = self.items_by_user.setdefault(user_id, [])
        item = WardrobeItem(id=f"new-{len(items) + 1}", user_id=user_id, **fields)
        items.insert(0, item)
        return item

    async def delete(self, user_id: str, item_id: str) -> bool:
        items = self.items_by_user.get(user_id, [])
        kept = [it for it in items if it.id != item_id]
        self.items_by_user[user_id] = kept
        return len(kept) != len(items)

    async def update(self, user_id: str, item_id: str, fields: dict) -> Optional[WardrobeItem]:
        items = self.items_by_user.get(user_id, [])
        for i, it in enumerate(items):
            if it.id == item_id:
                items[i] = it.model_copy(update=fields)
                return items[i]
        return None

    async def increment_wear(self, user_id: str, item_id: str) -> Optional[WardrobeItem]:
        items = self.items_by_user.get(user_id, [])
        for it in items:
            if it.id == item_id:
                return await self.update(user_id, item_id, {"wear_count": it.wear_count + 1})
        return None


class FakeFavoritesRepo:
    def __init__(self):
        self.records: List[FavoriteRecord] = []
        self._ids = itertools.count(1)

    async def list_for_user(self, user_id: str) -> List[FavoriteRecord]:
        return [r for r in reversed(self.records) if r.user_id == user_id]

    async def find_one(self, query: dict) -> Optional[FavoriteRecord]:
        found = next((r for r in self.records if all(getattr(r, k) == v for k, v in query.items())), None)
        # answer is fixed before yielding, like a round trip to the server
        await asyncio.sleep(0)
        return found

    async def insert(self, fields: dict) -> Optional[FavoriteRecord]:
        # mirrors the unique (user_id, external_id) index
        ext = fields.get("external_id")
        if isinstance(ext, str) and any(r.user_id == fields["user_id"] and r.external_id == ext for r in self.records):
            return None
        record = FavoriteRecord(id=f"fav-{next(self._ids)}", **fields)
        self.records.append(record)
        return record

    async def delete_by_external_id(self, user_id: str, external_id: str) -> bool:
        return self._delete(lambda r: r.user_id == user_id and r.external_id == external_id)

    async def delete_by_id(self, user_id: str, favorite_id: str) -> bool:
        return self._delete(lambda r: r.user_id == user_id and r.id == favorite_id)

    def _delete(self, pred) -> bool:
        for i, r in enumerate(self.records):
            if pred(r):
                del self.records[i]
                return True
        return False


class FakeRedis:
    def __init__(self):
        self.store: Dict[str, str] = {}
        self.expiry: Dict[str, int] = {}

    async def get(self, key: str):
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: Optional[int] = None):
        self.store[key] = value
        if ex is not None:
            self.expiry[key] = ex
        return True

    async def delete(self, key: str):
        return 1 if self.store.pop(key, None) is not None else 0


class FailingRedis(FakeRedis):
    """Redis that errors on the operations listed in `failing`."""

    def __init__(self, *failing: str):
        super().__init__()
        self.failing = set(failing)

    def _check(self, op: str) -> None:
        if op in self.failing:
            raise ConnectionError(f"redis {op} refused")

    async def get(self, key: str):
        self._check("get")
        return await super().get(key)

    async def set(self, key: str, value: str, ex: Optional[int] = None):
        self._check("set")
        return await super().set(key, value, ex=ex)

    async def delete(self, key: str):
        self._check("delete")
        return await super().delete(key)
