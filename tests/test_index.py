"""Tests for index page parsing and pagination."""
import pytest
from coach_scraper.scraper.errors import IndexFetchError
from coach_scraper.scraper.index import (
    ClassedLinkStrategy, ListingIndexFetcher, SuffixLinkStrategy, parse_row_metadata,
)

BASE = "https://www.prevost-stuff.com/forsale/"
INDEX_URL = BASE + "public_list_ads.php"

INDEX_HTML = """
<html><body><table>
<tr><td><a href="detail.html?id=42">2005 Liberty H3-45 Elegant Lady</a></td>
    <td>Seller: Acme RV Converter: Liberty Model: H345 Slides: 3 State: FL Price: $650,000 call today</td></tr>
<tr><td><a href="/forsale/2010-marathon.html">Details</a></td>
    <td>Converter: Marathon Price: Call</td></tr>
<tr><td><a href="hauler-42.html">2003 Featherlite car hauler</a></td>
    <td>Seller: Haul Co Price: $90,000</td></tr>
<tr><td><a href="https://example.com/about.php">About</a></td></tr>
<tr><td><a href="detail.html?id=42">duplicate link</a></td></tr>
</table></body></html>
"""

GEN1_HTML = """
<html><body>
<div class="coach-listing"><a href="/coach/abc123">2001 Prevost XLII</a></div>
<a class="coach-item" href="/coach/xyz789">1999 Marathon</a>
<a class="coach-item" href="/parts/99">Parts</a>
</body></html>
"""


def make_index(fetcher, **kwargs):
    kwargs.setdefault("sleep", lambda s: None)
    return ListingIndexFetcher(fetcher, index_url=INDEX_URL, **kwargs)


def test_row_metadata_labels():
    meta = parse_row_metadata(
        "2005 Liberty H3-45 Seller: Acme RV Converter: Liberty Model: H345 "
        "Slides: 3 State: FL Price: $650,000 call today",
        "2005 Liberty H3-45",
    )
    assert meta.raw_title == "2005 Liberty H3-45"
    assert meta.seller == "Acme RV"
    assert meta.converter == "Liberty"
    assert meta.model == "H345"
    assert meta.slide_count == 3
    assert meta.state == "FL"
    assert meta.price == 650000


def test_row_metadata_missing_fields():
    meta = parse_row_metadata("Converter: Marathon Price: Call", "Details")
    assert meta.converter == "Marathon"
    assert meta.price is None
    assert meta.raw_title is None
    assert meta.seller is None
    assert meta.slide_count is None


def test_suffix_strategy_resolves_and_excludes(fake_fetcher):
    index = make_index(fake_fetcher({INDEX_URL: INDEX_HTML}))
    candidates = index.fetch()
    urls = [c.url for c in candidates]
    assert urls == [
        BASE + "detail.html?id=42",
        "https://www.prevost-stuff.com/forsale/2010-marathon.html",
    ]
    assert candidates[0].metadata.converter == "Liberty"
    assert candidates[1].metadata.converter == "Marathon"


def test_falls_back_to_classed_links(fake_fetcher):
    index = make_index(fake_fetcher({INDEX_URL: GEN1_HTML}))
    urls = [c.url for c in index.fetch()]
    assert urls == [
        "https://www.prevost-stuff.com/coach/abc123",
        "https://www.prevost-stuff.com/coach/xyz789",
    ]


def test_strategy_order_first_match_wins():
    from coach_scraper.scraper.helpers import make_soup
    soup = make_soup(GEN1_HTML)
    assert SuffixLinkStrategy(BASE).candidates(soup, INDEX_URL) == []
    assert len(ClassedLinkStrategy().candidates(soup, INDEX_URL)) == 2


def test_shared_container_splits_rows_per_link(fake_fetcher):
    html = """
    <html><body><div>
    <a href="a.html">2005 Prevost</a> Price: $100,000
    <a href="b.html">2006 Prevost</a> Price: $200,000
    <a href="c.html">2001 Featherlite stacker</a> Price: $50,000
    </div></body></html>
    """
    candidates = make_index(fake_fetcher({INDEX_URL: html})).fetch()
    assert [c.url for c in candidates] == [BASE + "a.html", BASE + "b.html"]
    assert [c.metadata.price for c in candidates] == [100000, 200000]
    assert [c.metadata.raw_title for c in candidates] == ["2005 Prevost", "2006 Prevost"]


def test_abstract_strategy_cannot_be_built():
    from coach_scraper.scraper.index import IndexStrategy
    with pytest.raises(TypeError):
        IndexStrategy()


def test_single_page_by_default(fake_fetcher):
    fetcher = fake_fetcher({INDEX_URL: INDEX_HTML})
    make_index(fetcher).fetch()
    assert fetcher.requested == [INDEX_URL]


def test_pagination_stops_on_empty_page(fake_fetcher):
    fetcher = fake_fetcher({
        INDEX_URL: INDEX_HTML,
        INDEX_URL + "?page=2": GEN1_HTML,
        INDEX_URL + "?page=3": "<html><body><p>No more coaches</p></body></html>",
        INDEX_URL + "?page=4": INDEX_HTML,
    })
    delays = []
    index = make_index(fetcher, max_pages=5, delay=1.0, sleep=delays.append)
    candidates = index.fetch()
    assert len(candidates) == 4
    assert fetcher.requested[-1] == INDEX_URL + "?page=3"
    # one delay per index page fetched
    assert delays == [1.0, 1.0, 1.0]


def test_first_page_failure_aborts(fake_fetcher):
    with pytest.raises(IndexFetchError):
        make_index(fake_fetcher({})).fetch()


def test_later_page_failure_keeps_collected(fake_fetcher):
    index = make_index(fake_fetcher({INDEX_URL: INDEX_HTML}), max_pages=3)
    assert len(index.fetch()) == 2
