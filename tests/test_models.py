from starlette.datastructures import QueryParams

from app.db_models import ContentGenre, ContentRecord
from app.models import ContentItem, PageQuery


def test_page_query_reads_known_parameters():
    params = QueryParams("sort=rating&order=1&genre=Drama&keywords=walking+dead&x=1")

    query = PageQuery.from_request(params)

    assert query == PageQuery(
        sort="rating", order="1", genre="Drama", keywords="walking dead"
    )


def test_page_query_missing_parameters_are_absent():
    query = PageQuery.from_request({})

    assert query.sort is None
    assert query.order is None
    assert query.genre is None
    assert query.keywords is None


def test_page_query_ignores_non_string_values():
    query = PageQuery.from_request({"sort": ["name", "year"], "genre": 5})

    assert query.sort is None
    assert query.genre is None


def test_content_item_from_record_builds_document():
    record = ContentRecord(
        id="tt1520211",
        type="show",
        title="The Walking Dead",
        year=2010,
        num_seasons=11,
        latest_episode=1669507200,
        rating_percentage=82,
        rating_watching=14,
        rating_votes=3021,
        rating_loved=100,
        rating_hated=100,
        images={"poster": "https://example.com/twd.jpg"},
    )
    record.genres = [
        ContentGenre(genre="drama", position=0),
        ContentGenre(genre="horror", position=1),
    ]

    document = ContentItem.from_record(record).to_document()

    assert document["_id"] == "tt1520211"
    assert document["slug"] == "the-walking-dead"
    assert document["genres"] == ["drama", "horror"]
    assert document["rating"] == {
        "percentage": 82,
        "watching": 14,
        "votes": 3021,
        "loved": 100,
        "hated": 100,
    }
    assert document["images"] == {"poster": "https://example.com/twd.jpg"}
    assert "id" not in document
