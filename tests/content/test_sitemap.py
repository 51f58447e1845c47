from datetime import date, datetime, timezone

from src.content.sitemap import build_robots_txt, build_sitemap, sitemap_entries
from src.schemas.content import Article, PillarRef

TODAY = date(2026, 10, 19)


def _articles():
    return [
        Article(
            id="a1", title="The $10K Test", slug="the-10k-test", status="published",
            pillar=PillarRef(slug="picking-winners"),
            published_at=datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc),
        ),
        Article(id="a2", title="Orphan", slug="orphan", status="published"),
    ]


def test_sitemap_entries_cover_every_page():
    entries = sitemap_entries("https://gtmcookbook.com/", _articles(), ["project-scorer"], TODAY)
    urls = [entry.url for entry in entries]

    assert urls[0] == "https://gtmcookbook.com/"
    assert "https://gtmcookbook.com/articles/ship-it" in urls
    assert "https://gtmcookbook.com/articles/picking-winners/the-10k-test" in urls
    assert "https://gtmcookbook.com/tools/project-scorer" in urls
    # 5 static pages, 4 categories, 1 article with a pillar, 1 tool
    assert len(entries) == 11


def test_sitemap_article_uses_publish_date():
    entries = sitemap_entries("https://gtmcookbook.com", _articles(), [], TODAY)
    article = next(entry for entry in entries if entry.url.endswith("/the-10k-test"))
    assert article.last_modified == "2026-03-02"
    assert article.change_frequency == "monthly"
    assert article.priority == 0.7


def test_build_sitemap_xml():
    xml = build_sitemap("https://gtmcookbook.com", _articles(), ["launch-diagnostic"], TODAY)

    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">' in xml
    assert "<loc>https://gtmcookbook.com/tools/launch-diagnostic</loc>" in xml
    assert "<lastmod>2026-10-19</lastmod>" in xml
    assert xml.count("<url>") == 11
    assert xml.rstrip().endswith("</urlset>")


def test_robots_points_at_sitemap():
    robots = build_robots_txt("https://gtmcookbook.com/")
    assert "Sitemap: https://gtmcookbook.com/sitemap.xml" in robots
    assert "Disallow: /admin/" in robots
    assert robots.startswith("User-agent: *")
