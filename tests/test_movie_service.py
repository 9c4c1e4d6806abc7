from unittest.mock import MagicMock

import pytest

from core import errors
from movies import service

HEADER = "id;year;title;studios;producers;winner;;"


def _lines(mirror):
    return mirror.path.read_text(encoding="utf-8").splitlines()


def _payload(**overrides):
    payload = {
        "year": 1990,
        "title": "  Ghosts Can't Do It ",
        "studios": "Triumph Releasing",
        "producers": "Bo Derek",
        "winner": True,
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_allocates_writes_store_then_mirror(store, allocator, mirror):
    movie = await service.create_movie(**_payload(), allocator=allocator, mirror=mirror)

    assert movie.id == 1
    assert movie.title == "Ghosts Can't Do It"
    assert store.rows[1]["title"] == "Ghosts Can't Do It"
    assert allocator.current() == 1
    assert _lines(mirror) == [HEADER, "1;1990;Ghosts Can't Do It;Triumph Releasing;Bo Derek;yes;;"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"year": 1899},
        {"year": 2101},
        {"title": "   "},
        {"studios": ""},
        {"producers": None},
        {"title": "x" * 501},
        {"winner": None},
        {"title": "Evil\n2;1999;Ghost;S;P;yes;;"},
        {"title": "Dumb; Dumber"},
        {"studios": "Line\r\nBreak"},
        {"producers": "Allan Carr;Bo Derek"},
    ],
)
async def test_create_rejects_invalid_input_before_allocating(store, allocator, mirror, overrides):
    with pytest.raises(errors.ValidationError):
        await service.create_movie(**_payload(**overrides), allocator=allocator, mirror=mirror)

    assert allocator.current() is None
    assert store.rows == {}
    assert not mirror.path.exists()


@pytest.mark.asyncio
async def test_store_failure_still_consumes_the_id(store, allocator, mirror):
    store.fail_writes = True
    with pytest.raises(errors.StorageError):
        await service.create_movie(**_payload(), allocator=allocator, mirror=mirror)

    assert allocator.current() == 1
    assert not mirror.path.exists()

    store.fail_writes = False
    movie = await service.create_movie(**_payload(), allocator=allocator, mirror=mirror)
    assert movie.id == 2


@pytest.mark.asyncio
async def test_mirror_failure_after_store_write_is_reported(store, allocator):
    broken_mirror = MagicMock()
    broken_mirror.delimiter = ";"
    broken_mirror.append.side_effect = errors.StorageError("disk full")

    with pytest.raises(errors.StorageError, match="disk full"):
        await service.create_movie(**_payload(), allocator=allocator, mirror=broken_mirror)

    # No rollback: the store keeps the row, the mirror lags.
    assert 1 in store.rows


@pytest.mark.asyncio
async def test_update_rewrites_store_and_mirror_line(store, allocator, mirror):
    created = await service.create_movie(**_payload(), allocator=allocator, mirror=mirror)
    await service.create_movie(**_payload(title="Bolero", year=1984), allocator=allocator, mirror=mirror)

    updated = await service.update_movie(
        created.id,
        **_payload(title="Ghosts", winner=False),
        mirror=mirror,
    )

    assert updated.title == "Ghosts"
    assert store.rows[created.id]["winner"] is False
    matching = [line for line in _lines(mirror) if line.split(";")[0] == str(created.id)]
    assert matching == ["1;1990;Ghosts;Triumph Releasing;Bo Derek;;;"]
    assert allocator.current() == 2


@pytest.mark.asyncio
async def test_update_unknown_movie_raises_not_found(store, mirror):
    with pytest.raises(errors.NotFoundError):
        await service.update_movie(404, **_payload(), mirror=mirror)
    assert not mirror.path.exists()


@pytest.mark.asyncio
async def test_multiline_title_cannot_split_mirror_records(store, allocator, mirror):
    with pytest.raises(errors.ValidationError, match="line breaks"):
        await service.create_movie(
            **_payload(title="Evil\n2;1999;Ghost;S;P;yes;;"), allocator=allocator, mirror=mirror
        )

    first = await service.create_movie(**_payload(), allocator=allocator, mirror=mirror)
    second = await service.create_movie(**_payload(title="Bolero"), allocator=allocator, mirror=mirror)

    assert sorted(store.rows) == [first.id, second.id] == [1, 2]
    assert [line.split(";")[0] for line in _lines(mirror)] == ["id", "1", "2"]


@pytest.mark.asyncio
async def test_update_with_delimiter_in_title_leaves_store_untouched(store, allocator, mirror):
    created = await service.create_movie(**_payload(), allocator=allocator, mirror=mirror)

    with pytest.raises(errors.ValidationError, match="delimiter"):
        await service.update_movie(created.id, **_payload(title="Dumb; Dumber"), mirror=mirror)

    assert store.rows[created.id]["title"] == "Ghosts Can't Do It"
    assert _lines(mirror)[1].split(";")[2] == "Ghosts Can't Do It"


@pytest.mark.asyncio
async def test_update_rejects_non_positive_id(store, mirror):
    with pytest.raises(errors.ValidationError):
        await service.update_movie(0, **_payload(), mirror=mirror)


@pytest.mark.asyncio
async def test_delete_removes_from_store_and_mirror_but_keeps_counter(store, allocator, mirror):
    for _ in range(5):
        await service.create_movie(**_payload(), allocator=allocator, mirror=mirror)

    await service.delete_movie(5, mirror=mirror)

    assert 5 not in store.rows
    assert all(line.split(";")[0] != "5" for line in _lines(mirror))
    assert allocator.current() == 5

    created = await service.create_movie(**_payload(), allocator=allocator, mirror=mirror)
    assert created.id == 6


@pytest.mark.asyncio
async def test_ids_keep_increasing_across_deletes(store, allocator, mirror):
    issued = []
    for _ in range(3):
        movie = await service.create_movie(**_payload(), allocator=allocator, mirror=mirror)
        issued.append(movie.id)
        await service.delete_movie(movie.id, mirror=mirror)

    assert issued == sorted(issued)
    assert len(set(issued)) == 3
    assert store.rows == {}
    assert _lines(mirror) == [HEADER]


@pytest.mark.asyncio
async def test_delete_unknown_movie_raises_not_found(store, mirror):
    with pytest.raises(errors.NotFoundError):
        await service.delete_movie(12, mirror=mirror)


@pytest.mark.asyncio
async def test_delete_surfaces_missing_mirror_line(store, mirror):
    store.add(3, 1990, "Only in store", "S", "P", True)

    with pytest.raises(errors.NotFoundError, match="mirror"):
        await service.delete_movie(3, mirror=mirror)

    assert 3 not in store.rows


@pytest.mark.asyncio
async def test_get_movie(store):
    store.add(9, 2000, "Battlefield Earth", "Warner Bros.", "Elie Samaha and Jonathan D. Krane", True)

    movie = await service.get_movie(9)

    assert movie.title == "Battlefield Earth"
    with pytest.raises(errors.NotFoundError):
        await service.get_movie(10)
    with pytest.raises(errors.ValidationError):
        await service.get_movie(-1)


@pytest.mark.asyncio
async def test_list_movies_paginates_and_sorts(store):
    for movie_id, year in [(1, 1985), (2, 1980), (3, 1995), (4, 1990)]:
        store.add(movie_id, year, f"Title {movie_id}", "Studio", "Producer", False)

    page = await service.list_movies(page=1, size=2, sort_by="year", direction="desc")

    assert [m.year for m in page.movies] == [1985, 1980]
    assert page.total_elements == 4
    assert page.total_pages == 2
    assert page.sort_by == "year"
    assert page.direction == "desc"


@pytest.mark.asyncio
async def test_list_movies_unknown_sort_field_falls_back_to_id(store):
    store.add(2, 1980, "B", "Studio", "Producer", False)
    store.add(1, 1990, "A", "Studio", "Producer", False)

    page = await service.list_movies(sort_by="budget")

    assert page.sort_by == "id"
    assert [m.id for m in page.movies] == [1, 2]


@pytest.mark.asyncio
async def test_list_movies_filters(store):
    store.add(1, 1980, "Can't Stop the Music", "AFD", "Allan Carr", True)
    store.add(2, 1984, "Bolero", "Cannon Films", "Bo Derek", True)

    page = await service.list_movies(filter_type="producers", filter_value="derek")

    assert [m.id for m in page.movies] == [2]
    assert page.filter_value == "derek"
