"""Idempotent favorites."""
import asyncio

from clovet.domain.models.favorite import FavoriteIn
from clovet.domain.services.favorites_svc import FavoritesService, identity_query

from fakes import FakeFavoritesRepo


def _fav(**kw) -> FavoriteIn:
    base = dict(item_name="Vintage Denim Jacket", platform="Carousell", image_url="https://img.example/j.jpg")
    return FavoriteIn(**{**base, **kw})


def test_identity_prefers_external_id_then_url_then_name_and_image() -> None:
    assert identity_query("u1", _fav(external_id="123", url="https://x")) == {"user_id": "u1", "external_id": "123"}
    assert identity_query("u1", _fav(url="https://x")) == {"user_id": "u1", "url": "https://x"}
    assert identity_query("u1", _fav()) == {
        "user_id": "u1",
        "item_name": "Vintage Denim Jacket",
        "image_url": "https://img.example/j.jpg",
    }


async def test_adding_twice_returns_the_same_record() -> None:
    repo = FakeFavoritesRepo()
    svc = FavoritesService(repo)

    first, created = await svc.add_favorite("u1", _fav(external_id="123", price=45))
    again, created_again = await svc.add_favorite("u1", _fav(external_id="123", price=99))

    assert created is True
    assert created_again is False
    assert again.id == first.id
    assert len(await svc.list_favorites("u1")) == 1


async def test_same_listing_for_different_users_is_separate() -> None:
    svc = FavoritesService(FakeFavoritesRepo())

    a, _ = await svc.add_favorite("u1", _fav(external_id="123"))
    b, created = await svc.add_favorite("u2", _fav(external_id="123"))

    assert created is True
    assert a.id != b.id


async def test_url_and_name_image_fallback_identity() -> None:
    svc = FavoritesService(FakeFavoritesRepo())

    by_url, _ = await svc.add_favorite("u1", _fav(url="https://carousell.example/p/1"))
    by_url_again, created = await svc.add_favorite("u1", _fav(item_name="Renamed", url="https://carousell.example/p/1"))
    assert created is False
    assert by_url_again.id == by_url.id

    plain, _ = await svc.add_favorite("u1", _fav(image_url="https://img.example/other.jpg"))
    plain_again, created = await svc.add_favorite("u1", _fav(image_url="https://img.example/other.jpg"))
    assert created is False
    assert plain_again.id == plain.id


async def test_metadata_is_stringified_and_nulls_dropped() -> None:
    svc = FavoritesService(FakeFavoritesRepo())

    record, _ = await svc.add_favorite("u1", _fav(metadata={"size": "M", "likes": None}))

    assert record.metadata == {"size": "M"}


async def test_remove_by_external_id_then_by_id() -> None:
    repo = FakeFavoritesRepo()
    svc = FavoritesService(repo)
    with_ext, _ = await svc.add_favorite("u1", _fav(external_id="123"))
    plain, _ = await svc.add_favorite("u1", _fav(url="https://x"))

    assert await svc.remove_favorite("u1", "123") is True
    assert await svc.remove_favorite("u1", plain.id) is True
    assert await svc.remove_favorite("u1", with_ext.id) is False
    assert await svc.list_favorites("u1") == []


async def test_remove_is_scoped_to_the_owner() -> None:
    svc = FavoritesService(FakeFavoritesRepo())
    await svc.add_favorite("u1", _fav(external_id="123"))

    assert await svc.remove_favorite("u2", "123") is False
    assert len(await svc.list_favorites("u1")) == 1


async def test_concurrent_adds_store_one_record() -> None:
    repo = FakeFavoritesRepo()
    svc = FavoritesService(repo)

    results = await asyncio.gather(
        svc.add_favorite("u1", _fav(external_id="123")),
        svc.add_favorite("u1", _fav(external_id="123")),
    )

    assert sorted(created for _, created in results) == [False, True]
    assert results[0][0].id == results[1][0].id
    assert len(await svc.list_favorites("u1")) == 1
