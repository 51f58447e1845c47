import pytest
from unittest.mock import AsyncMock

from src.backend.client import BackendClient, BackendUnavailableError, QueryResult
from src.content.service import ContentService
from src.schemas.content import ArticleFilters

ARTICLE_ROW = {
    "id": "a1",
    "title": "The $10K Test",
    "slug": "the-10k-test",
    "status": "published",
    "reading_time": 4,
    "published_at": "2026-03-02T09:30:00+00:00",
    "content_pillars": {"id": "p1", "name": "Picking Winners", "slug": "picking-winners", "color_theme": "green"},
    "article_tags": [{"tag": {"id": "t1", "name": "Validation", "slug": "validation"}}],
}
OTHER_ROW = {
    "id": "a2",
    "title": "Validation Interviews",
    "slug": "validation-interviews",
    "status": "published",
    "content_pillars": {"id": "p1", "name": "Picking Winners", "slug": "picking-winners"},
    "article_tags": [{"tag": {"id": "t1", "name": "Validation", "slug": "validation"}}],
}


@pytest.fixture
def backend():
    return AsyncMock(spec=BackendClient)


@pytest.fixture
def service(backend):
    return ContentService(backend)


@pytest.mark.asyncio
async def test_list_articles_paginates(service, backend):
    backend.select.return_value = QueryResult(rows=[ARTICLE_ROW], total=25)

    page = await service.list_articles(ArticleFilters(pillar="p1", limit=10, offset=10))

    assert page.pagination.total == 25
    assert page.pagination.has_more is True
    assert page.data[0].category == "picking-winners"
    assert page.data[0].tags == ["validation"]
    kwargs = backend.select.await_args.kwargs
    assert kwargs["filters"] == {"status": "published", "pillar_id": "p1"}
    assert kwargs["search"] is None
    assert kwargs["count"] is True


@pytest.mark.asyncio
async def test_list_articles_last_page(service, backend):
    backend.select.return_value = QueryResult(rows=[ARTICLE_ROW], total=11)
    page = await service.list_articles(ArticleFilters(search="test", limit=10, offset=10))
    assert page.pagination.has_more is False
    assert backend.select.await_args.kwargs["search"] == (("title", "subtitle", "meta_description"), "test")


@pytest.mark.asyncio
async def test_get_article_by_pillar_and_slug(service, backend):
    backend.select_one.return_value = ARTICLE_ROW

    article = await service.get_article("picking-winners", "the-10k-test")

    assert article.slug == "the-10k-test"
    assert backend.select_one.await_args.kwargs["filters"] == {
        "slug": "the-10k-test",
        "content_pillars.slug": "picking-winners",
        "status": "published",
    }


@pytest.mark.asyncio
async def test_get_article_missing(service, backend):
    backend.select_one.return_value = None
    assert await service.get_article("scale", "nope") is None


@pytest.mark.asyncio
async def test_browse_filters_published_articles(service, backend):
    backend.select.return_value = QueryResult(rows=[ARTICLE_ROW, OTHER_ROW])
    selected = await service.browse(read_time="short")
    assert [article.slug for article in selected] == ["the-10k-test"]


@pytest.mark.asyncio
async def test_tag_index(service, backend):
    backend.select.return_value = QueryResult(rows=[ARTICLE_ROW, OTHER_ROW])
    assert await service.tag_index() == {"all": ["validation"], "popular": ["validation"]}


@pytest.mark.asyncio
async def test_similar_articles(service, backend):
    backend.select_one.return_value = ARTICLE_ROW
    backend.select.return_value = QueryResult(rows=[ARTICLE_ROW, OTHER_ROW])

    similar = await service.similar_articles("picking-winners", "the-10k-test")

    assert [article.slug for article in similar] == ["validation-interviews"]


@pytest.mark.asyncio
async def test_similar_articles_unknown_article(service, backend):
    backend.select_one.return_value = None
    assert await service.similar_articles("scale", "nope") is None
    backend.select.assert_not_awaited()


@pytest.mark.asyncio
async def test_list_tools_and_pillars(service, backend):
    backend.select.side_effect = [
        QueryResult(rows=[{"id": "p1", "name": "Scale", "slug": "scale", "order_index": 4}]),
        QueryResult(rows=[{"id": "t1", "name": "Scorer", "slug": "project-scorer", "status": "published",
                           "content_pillars": {"slug": "picking-winners"}}]),
    ]

    pillars = await service.list_pillars()
    tools = await service.list_tools(pillar="p1")

    assert pillars[0].slug == "scale"
    assert tools[0].pillar.slug == "picking-winners"
    assert backend.select.await_args.kwargs["filters"] == {"status": "published", "pillar_id": "p1"}


@pytest.mark.asyncio
async def test_search_blank_query_skips_backend(service, backend):
    assert await service.search("   ") == []
    backend.select.assert_not_awaited()


@pytest.mark.asyncio
async def test_search_hits(service, backend):
    backend.select.return_value = QueryResult(rows=[{
        "id": "a1", "title": "The $10K Test", "slug": "the-10k-test", "reading_time": 4,
        "content_pillars": {"name": "Picking Winners", "slug": "picking-winners"},
    }])
    hits = await service.search("10k")
    assert hits[0].pillar.slug == "picking-winners"


@pytest.mark.asyncio
async def test_backend_errors_propagate(service, backend):
    backend.select.side_effect = BackendUnavailableError("down")
    with pytest.raises(BackendUnavailableError):
        await service.list_pillars()
