"""
Tests for catalog services: cached reads and invalidation after mutations.
"""

import pytest
from sqlalchemy.exc import OperationalError

from catalog.cache import CacheKeys
from catalog.constants import ItemType
from catalog.exceptions import InvalidRequestError, ItemNotFoundError
from catalog.repositories import PipeFilters, RatingRepository
from catalog.services import (
    admin_service,
    catalog_service,
    interaction_service,
    moderation_service,
    presenters,
    search_service,
    stats_service,
)

PIPE_PAYLOAD = {
    "name": "Canadian",
    "brand": "Dunhill",
    "model": "",
    "material": "Briar",
    "shape": "Canadian",
    "finish": "Sandblast",
    "filter_type": "None",
    "stem_material": "Acrylic",
    "year": None,
    "country": "England",
    "observations": None,
    "is_active": True,
}


# =============================================================================
# Reads
# =============================================================================


def test_list_items_payload_shape(test_session, cache, make_pipe, make_image):
    pipe = make_pipe(name="Billiard", brand="Peterson", country="Ireland")
    make_image(pipe, filename="feat.webp", is_featured=True, alt_text="front")
    RatingRepository(test_session).upsert("pipe", pipe.id, "s1", 4)
    RatingRepository(test_session).upsert("pipe", pipe.id, "s2", 5)
    test_session.commit()

    page = catalog_service.list_items(test_session, cache, ItemType.PIPE, PipeFilters())

    assert page["pagination"] == {"page": 1, "limit": 20, "total": 1, "pages": 1}
    assert page["filters"] == {"brands": ["Peterson"], "countries": ["Ireland"]}
    row = page["data"][0]
    assert row["id"] == pipe.id
    assert row["featured_image"] == {"id": row["featured_image"]["id"], "filename": "feat.webp", "alt_text": "front"}
    assert row["average_rating"] == 4.5
    assert row["rating_count"] == 2
    assert "is_active" not in row


def test_list_items_is_served_from_cache(test_session, cache, fake_redis, make_pipe):
    make_pipe(name="First")
    filters = PipeFilters(brand="Peterson")

    first = catalog_service.list_items(test_session, cache, ItemType.PIPE, filters)
    make_pipe(name="Second")  # direct write, no invalidation
    second = catalog_service.list_items(test_session, cache, ItemType.PIPE, filters)

    assert first == second
    assert CacheKeys.item_list(ItemType.PIPE, filters.as_params()) in fake_redis.live_keys()


def test_list_items_refreshes_after_ttl(test_session, cache, clock, make_pipe):
    make_pipe(name="First")
    catalog_service.list_items(test_session, cache, ItemType.PIPE, PipeFilters())
    make_pipe(name="Second")

    clock.advance(301)
    page = catalog_service.list_items(test_session, cache, ItemType.PIPE, PipeFilters())

    assert page["pagination"]["total"] == 2


def test_get_item_returns_gallery_and_caches(test_session, cache, fake_redis, make_tobacco, make_image):
    tobacco = make_tobacco()
    make_image(tobacco, filename="a.webp", sort_order=1)
    make_image(tobacco, filename="b.webp", sort_order=2, is_featured=True)

    detail = catalog_service.get_item(test_session, cache, ItemType.TOBACCO, tobacco.id)

    assert [i["filename"] for i in detail["images"]] == ["b.webp", "a.webp"]
    assert detail["average_rating"] == 0
    assert detail["rating_count"] == 0
    assert isinstance(detail["created_at"], str)
    assert f"tobacco:{tobacco.id}" in fake_redis.live_keys()


def test_get_item_missing_or_inactive_raises_and_is_not_cached(test_session, cache, fake_redis, make_pipe):
    hidden = make_pipe(is_active=False)

    with pytest.raises(ItemNotFoundError) as exc_info:
        catalog_service.get_item(test_session, cache, ItemType.PIPE, hidden.id)
    with pytest.raises(ItemNotFoundError):
        catalog_service.get_item(test_session, cache, ItemType.PIPE, "nope")

    assert exc_info.value.code == "PIPE_NOT_FOUND"
    assert fake_redis.live_keys() == []


def test_reads_work_with_redis_down(test_session, failing_cache, make_pipe):
    pipe = make_pipe()

    page = catalog_service.list_items(test_session, failing_cache, ItemType.PIPE, PipeFilters())
    detail = catalog_service.get_item(test_session, failing_cache, ItemType.PIPE, pipe.id)

    assert page["pagination"]["total"] == 1
    assert detail["id"] == pipe.id


@pytest.mark.parametrize("average,expected", [(4.25, 4.3), (3.333333, 3.3), (4.0, 4.0), (2.95, 3.0)])
def test_rating_summary_rounds_half_up(average, expected):
    assert presenters.rating_summary((average, 3)) == {"average_rating": expected, "rating_count": 3}


# =============================================================================
# Admin mutations invalidate
# =============================================================================


def test_create_item_invalidates_lists_stats_and_search(test_session, cache, make_pipe):
    make_pipe()
    catalog_service.list_items(test_session, cache, ItemType.PIPE, PipeFilters())
    stats_service.get_stats(test_session, cache)
    search_service.search(test_session, cache, "billiard")

    admin_service.create_item(test_session, cache, ItemType.PIPE, dict(PIPE_PAYLOAD))

    page = catalog_service.list_items(test_session, cache, ItemType.PIPE, PipeFilters())
    assert page["pagination"]["total"] == 2
    assert stats_service.get_stats(test_session, cache)["total_pipes"] == 2
    assert cache.get(CacheKeys.search({"q": "billiard", "page": 1, "limit": 20})) is None


def test_update_item_invalidates_detail(test_session, cache, make_pipe):
    pipe = make_pipe(name="Old")
    catalog_service.get_item(test_session, cache, ItemType.PIPE, pipe.id)

    admin_service.update_item(test_session, cache, ItemType.PIPE, pipe.id, {**PIPE_PAYLOAD, "name": "New"})

    assert catalog_service.get_item(test_session, cache, ItemType.PIPE, pipe.id)["name"] == "New"


def test_toggle_status_hides_item_from_public_reads(test_session, cache, make_accessory):
    accessory = make_accessory()
    catalog_service.get_item(test_session, cache, ItemType.ACCESSORY, accessory.id)

    result = admin_service.toggle_status(test_session, cache, ItemType.ACCESSORY, accessory.id, False)

    assert result["item"]["is_active"] is False
    with pytest.raises(ItemNotFoundError):
        catalog_service.get_item(test_session, cache, ItemType.ACCESSORY, accessory.id)


def test_failed_commit_leaves_cache_untouched(test_session, cache, fake_redis, monkeypatch, make_pipe):
    pipe = make_pipe()
    catalog_service.get_item(test_session, cache, ItemType.PIPE, pipe.id)
    catalog_service.list_items(test_session, cache, ItemType.PIPE, PipeFilters())
    cached_before = fake_redis.live_keys()

    def failing_commit():
        raise OperationalError("UPDATE pipes", {}, Exception("database is locked"))

    monkeypatch.setattr(test_session, "commit", failing_commit)

    with pytest.raises(OperationalError):
        admin_service.toggle_status(test_session, cache, ItemType.PIPE, pipe.id, False)

    assert fake_redis.live_keys() == cached_before
    assert f"pipe:{pipe.id}" in cached_before


def test_toggle_status_rejects_non_boolean(test_session, cache, make_pipe):
    pipe = make_pipe()

    with pytest.raises(InvalidRequestError):
        admin_service.toggle_status(test_session, cache, ItemType.PIPE, pipe.id, "yes")


def test_delete_item_removes_images_and_files(test_session, cache, upload_dir, make_pipe, make_image):
    pipe = make_pipe()
    upload_dir.mkdir(parents=True)
    (upload_dir / "gone.webp").write_bytes(b"x")
    make_image(pipe, filename="gone.webp")

    admin_service.delete_item(test_session, cache, ItemType.PIPE, pipe.id)

    assert not (upload_dir / "gone.webp").exists()
    with pytest.raises(ItemNotFoundError):
        admin_service.get_item(test_session, ItemType.PIPE, pipe.id)


def test_admin_list_pagination(test_session, make_pipe):
    for i in range(3):
        make_pipe(name=f"P{i}", is_active=i != 1)

    result = admin_service.list_items(test_session, ItemType.PIPE, page=1, limit=2, sort_by="name", sort_order="asc")

    assert [p["name"] for p in result["pipes"]] == ["P0", "P1"]
    assert result["pagination"] == {
        "current_page": 1,
        "total_pages": 2,
        "total_count": 3,
        "has_next": True,
        "has_prev": False,
    }


# =============================================================================
# Search
# =============================================================================


def test_search_rejects_short_query(test_session, cache):
    with pytest.raises(InvalidRequestError) as exc_info:
        search_service.search(test_session, cache, " a ")

    assert exc_info.value.code == "INVALID_QUERY"


def test_search_rejects_unknown_type(test_session, cache):
    with pytest.raises(InvalidRequestError):
        search_service.search(test_session, cache, "briar", "cigars")


def test_search_across_types(test_session, cache, make_pipe, make_tobacco, make_accessory):
    make_pipe(name="Peterson Briar")
    make_tobacco(name="Briar Fox")
    make_accessory(name="Briar Cleaner", description="For briar pipes")

    result = search_service.search(test_session, cache, "  BRIAR ", limit=9)

    assert result["query"] == "BRIAR"
    assert sorted(r["type"] for r in result["results"]) == ["accessory", "pipe", "tobacco"]
    pipe_row = next(r for r in result["results"] if r["type"] == "pipe")
    assert pipe_row["url"] == f"/pipes/{pipe_row['id']}"
    assert result["pagination"]["total"] == 3


def test_search_within_one_type_paginates(test_session, cache, make_pipe):
    for i in range(5):
        make_pipe(name=f"Briar {i}")

    result = search_service.search(test_session, cache, "briar", "pipes", page=2, limit=2)

    assert [r["name"] for r in result["results"]] == ["Briar 2", "Briar 3"]


# =============================================================================
# Comments & ratings
# =============================================================================


def test_add_comment_is_pending_until_approved(test_session, cache, make_pipe):
    pipe = make_pipe()
    assert interaction_service.list_comments(test_session, cache, ItemType.PIPE, pipe.id)["comments"] == []

    created = interaction_service.add_comment(
        test_session, cache, ItemType.PIPE, pipe.id, "  Smokes cool and dry  ", "sess-1", "Ann"
    )
    assert created["comment"]["is_approved"] is False
    assert interaction_service.list_comments(test_session, cache, ItemType.PIPE, pipe.id)["comments"] == []

    moderation_service.moderate_comment(test_session, cache, created["comment"]["id"], True, "admin@pipecatalog.com")

    comments = interaction_service.list_comments(test_session, cache, ItemType.PIPE, pipe.id)["comments"]
    assert [c["content"] for c in comments] == ["Smokes cool and dry"]


@pytest.mark.parametrize(
    "content,author,session_id,code",
    [
        ("", None, "s", "MISSING_CONTENT"),
        ("x" * 2001, None, "s", "CONTENT_TOO_LONG"),
        ("fine", "a" * 101, "s", "AUTHOR_NAME_TOO_LONG"),
        ("fine", None, None, "MISSING_SESSION"),
        ("This is a SCAM", None, "s", "INAPPROPRIATE_CONTENT"),
    ],
)
def test_comment_validation(content, author, session_id, code):
    with pytest.raises(InvalidRequestError) as exc_info:
        interaction_service.validate_comment(content, author, session_id)

    assert exc_info.value.code == code


def test_comment_on_inactive_item_is_not_found(test_session, cache, make_pipe):
    pipe = make_pipe(is_active=False)

    with pytest.raises(ItemNotFoundError):
        interaction_service.add_comment(test_session, cache, ItemType.PIPE, pipe.id, "Nice", "s")


def test_rate_item_updates_summary_and_invalidates(test_session, cache, make_pipe):
    pipe = make_pipe()
    catalog_service.get_item(test_session, cache, ItemType.PIPE, pipe.id)

    interaction_service.rate_item(test_session, cache, ItemType.PIPE, pipe.id, 3, "s1")
    result = interaction_service.rate_item(test_session, cache, ItemType.PIPE, pipe.id, 4, "s2")

    assert result["average_rating"] == 3.5
    assert result["rating_count"] == 2
    detail = catalog_service.get_item(test_session, cache, ItemType.PIPE, pipe.id)
    assert detail["average_rating"] == 3.5


@pytest.mark.parametrize("rating", [0, 6, 4.5, "5", True, None])
def test_rate_item_rejects_invalid_values(test_session, cache, make_pipe, rating):
    pipe = make_pipe()

    with pytest.raises(InvalidRequestError):
        interaction_service.rate_item(test_session, cache, ItemType.PIPE, pipe.id, rating, "s1")


# =============================================================================
# Moderation & stats
# =============================================================================


def test_bulk_approve_counts_and_invalidates_threads(test_session, cache, make_pipe):
    pipe = make_pipe()
    ids = [
        interaction_service.add_comment(test_session, cache, ItemType.PIPE, pipe.id, f"Comment {i}", "s")["comment"]["id"]
        for i in range(3)
    ]
    interaction_service.list_comments(test_session, cache, ItemType.PIPE, pipe.id)

    result = moderation_service.bulk_approve(test_session, cache, ids[:2], "admin@pipecatalog.com")

    assert result["updated_count"] == 2
    listed = interaction_service.list_comments(test_session, cache, ItemType.PIPE, pipe.id)
    assert listed["pagination"]["total"] == 2


def test_stats_are_cached_until_invalidated(test_session, cache, make_pipe, make_tobacco):
    make_pipe()
    make_tobacco(is_active=False)

    stats = stats_service.get_stats(test_session, cache)
    make_pipe()  # direct write

    assert stats["total_pipes"] == 1
    assert stats["total_tobaccos"] == 0
    assert stats_service.get_stats(test_session, cache)["total_pipes"] == 1

    cache.invalidate_entity(ItemType.PIPE)
    assert stats_service.get_stats(test_session, cache)["total_pipes"] == 2
