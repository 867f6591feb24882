"""End-to-end runs of the pipeline against canned pages and an in-memory store."""
import pytest
from coach_scraper import crud, models
from coach_scraper.scraper.errors import IndexFetchError
from coach_scraper.scraper.runner import RunState, ScrapeRunner

BASE = "https://www.prevost-stuff.com/forsale/"
INDEX_URL = BASE + "public_list_ads.php"
DETAIL_42 = BASE + "detail.html?id=42"
DETAIL_43 = BASE + "detail.html?id=43"
DETAIL_44 = BASE + "detail.html?id=44"

INDEX_HTML = """
<html><body><table>
<tr><td><a href="detail.html?id=42">View</a></td>
    <td>Seller: Acme RV Converter: Liberty Model: H345 Slides: 3 State: FL Price: $650,000</td></tr>
<tr><td><a href="detail.html?id=43">2001 Marathon XLII</a></td><td>Price: $400,000</td></tr>
<tr><td><a href="detail.html?id=44">2010 Prevost H3-45</a></td><td>State: TX</td></tr>
</table></body></html>
"""

DETAIL_HTML = """
<html><body>
<h1>2005 Liberty Prevost H3-45 Elegant Lady</h1>
<img src="/photos/1.jpg"><img src="/photos/2.jpg">
<ul><li>Aqua Hot heating system</li><li>Residential refrigerator</li></ul>
</body></html>
"""


@pytest.fixture
def pages():
    return {
        INDEX_URL: INDEX_HTML,
        DETAIL_42: DETAIL_HTML,
        DETAIL_43: "<html><body><h1>2001 Marathon XLII</h1></body></html>",
        DETAIL_44: "<html><body><h1>2010 Prevost H3-45</h1></body></html>",
    }


def make_runner(session_factory, fetcher):
    return ScrapeRunner(
        session_factory=session_factory,
        fetcher_factory=lambda: fetcher,
        index_url=INDEX_URL,
        max_pages=1,
        delay=0,
        sleep=lambda s: None,
    )


def test_index_row_to_normalized_record(session_factory, db, fake_fetcher, pages):
    fetcher = fake_fetcher(pages)
    summary = make_runner(session_factory, fetcher).run()

    assert (summary.discovered, summary.created, summary.skipped, summary.failed) == (3, 3, 0, 0)
    coach = crud.get_coach_by_external_id(db, "42")
    assert coach.make == "Liberty"
    assert coach.model == "H345"
    assert coach.slide_count == 3
    assert coach.location == "FL"
    assert float(coach.price) == 650000
    assert coach.seller == "Acme RV"
    assert coach.title == "2005 Liberty Prevost H3-45 Elegant Lady"
    assert coach.category == "Luxury"
    assert len(coach.images) == 2
    assert coach.images[0].is_featured
    assert fetcher.closed


def test_second_run_skips_known_listings(session_factory, db, fake_fetcher, pages):
    make_runner(session_factory, fake_fetcher(pages)).run()
    fetcher = fake_fetcher(pages)
    summary = make_runner(session_factory, fetcher).run()

    assert summary.created == 0
    assert summary.skipped == 3
    # only the index was requested; no detail page fetched for known ids
    assert fetcher.requested == [INDEX_URL]
    assert db.query(models.Coach).count() == 3


def test_failing_listing_does_not_stop_run(session_factory, db, fake_fetcher, pages):
    pages[DETAIL_43] = RuntimeError("boom")
    del pages[DETAIL_44]
    runner = make_runner(session_factory, fake_fetcher(pages))
    summary = runner.run()

    assert summary.created == 1
    assert summary.failed == 2
    assert runner.state is RunState.IDLE
    assert [c.external_id for c in db.query(models.Coach)] == ["42"]


def test_index_failure_aborts_run(session_factory, fake_fetcher):
    runner = make_runner(session_factory, fake_fetcher({}))
    with pytest.raises(IndexFetchError):
        runner.run()
    assert runner.state is RunState.IDLE


def test_state_is_running_during_run(session_factory, fake_fetcher, pages):
    seen = []
    fetcher = fake_fetcher(pages)
    runner = make_runner(session_factory, fetcher)
    original_get = fetcher.get

    def spy(url):
        seen.append(runner.state)
        return original_get(url)

    fetcher.get = spy
    assert runner.state is RunState.IDLE
    runner.run()
    assert set(seen) == {RunState.RUNNING}
    assert runner.state is RunState.IDLE
    assert runner.last_summary.created == 3


def test_missing_price_gets_placeholder(session_factory, db, fake_fetcher, pages):
    make_runner(session_factory, fake_fetcher(pages)).run()
    # id 44's row and page carry no price
    assert float(crud.get_coach_by_external_id(db, "44").price) == 500000
    assert float(crud.get_coach_by_external_id(db, "43").price) == 400000


def test_storage_error_abandons_listing_and_run_continues(
    session_factory, db, fake_fetcher, pages, monkeypatch, caplog
):
    calls = []

    def failing_insert_image(db, coach_id, url, featured, position):
        calls.append(url)
        raise RuntimeError("disk full")

    monkeypatch.setattr(crud, "insert_image", failing_insert_image)
    summary = make_runner(session_factory, fake_fetcher(pages)).run()

    assert (summary.created, summary.failed) == (2, 1)
    assert "Error processing listing " + DETAIL_42 in caplog.text
    assert len(calls) == 1
    # the coach row was committed before the image write failed
    coach = crud.get_coach_by_external_id(db, "42")
    assert coach is not None
    assert coach.images == []
    assert coach.features == []
    assert {c.external_id for c in db.query(models.Coach)} == {"42", "43", "44"}


def test_overlapping_runs_keep_running_state(session_factory, fake_fetcher, pages):
    fetcher = fake_fetcher(pages)
    runner = make_runner(session_factory, fetcher)
    original_get = fetcher.get
    after_inner = []

    def get(url):
        if not after_inner:
            after_inner.append(None)
            runner.run()
            after_inner[0] = runner.state
        return original_get(url)

    fetcher.get = get
    summary = runner.run()

    assert after_inner == [RunState.RUNNING]
    assert runner.state is RunState.IDLE
    # the nested run stored everything first
    assert summary.skipped == 3
