from datetime import date
from typing import Iterable, List, NamedTuple
from xml.sax.saxutils import escape

from src.schemas.content import Article

CATEGORY_SLUGS = ("picking-winners", "ship-it", "first-customers", "scale")


class SitemapEntry(NamedTuple):
    url: str
    last_modified: str
    change_frequency: str
    priority: float


STATIC_PAGES = (
    ("/", "weekly", 1.0),
    ("/start", "monthly", 0.9),
    ("/newsletter", "monthly", 0.8),
    ("/tools", "weekly", 0.8),
    ("/about", "yearly", 0.5),
)


def sitemap_entries(base_url: str, articles: Iterable[Article], tool_slugs: Iterable[str], today: date) -> List[SitemapEntry]:
    base_url = base_url.rstrip("/")
    current = today.isoformat()

    entries = [SitemapEntry(f"{base_url}{path}", current, freq, priority) for path, freq, priority in STATIC_PAGES]
    entries.extend(
        SitemapEntry(f"{base_url}/articles/{category}", current, "weekly", 0.8) for category in CATEGORY_SLUGS
    )
    for article in articles:
        if not article.category:
            continue
        last_modified = article.published_at.date().isoformat() if article.published_at else current
        entries.append(
            SitemapEntry(f"{base_url}/articles/{article.category}/{article.slug}", last_modified, "monthly", 0.7)
        )
    entries.extend(SitemapEntry(f"{base_url}/tools/{slug}", current, "monthly", 0.7) for slug in tool_slugs)
    return entries


def build_sitemap(base_url: str, articles: Iterable[Article], tool_slugs: Iterable[str], today: date) -> str:
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
    ]
    for entry in sitemap_entries(base_url, articles, tool_slugs, today):
        lines.extend([
            "  <url>",
            f"    <loc>{escape(entry.url)}</loc>",
            f"    <lastmod>{entry.last_modified}</lastmod>",
            f"    <changefreq>{entry.change_frequency}</changefreq>",
            f"    <priority>{entry.priority}</priority>",
            "  </url>",
        ])
    lines.append("</urlset>")
    return "\n".join(lines)


def build_robots_txt(base_url: str) -> str:
    return f"""User-agent: *
Allow: /

# Disallow admin pages
Disallow: /admin/
Disallow: /private/

User-agent: Googlebot
Allow: /

User-agent: Bingbot
Allow: /

User-agent: Twitterbot
Allow: /

User-agent: facebookexternalhit
Allow: /

Sitemap: {base_url.rstrip('/')}/sitemap.xml

Crawl-delay: 1
"""
