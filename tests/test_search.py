import pytest

from arena_classes import MalformedMarkup, NoActiveSearch
from arena_classes.data_models.search import SearchQuery, SearchResultStatus
from arena_classes.services.catalog import CatalogService

from fakes import BASE, HOST, ajax_script, envelope, page_url, record, results_page

SEARCH_FORM = """
<html><body>
<form class="arena-extended-search-original" action="/web/arena/extended-search?submit=1" method="post">
  <input type="hidden" name="id1_hf_0" value=""/>
  <input type="hidden" name="wicket:token" value="abc"/>
  <div class="arena-extended-search-original-field-container">
    <span>Title</span><input type="text" name="title"/>
  </div>
  <input type="submit" name="searchButton" value="Search"/>
</form>
</body></html>
"""
SUBMIT_URL = f"{BASE}/extended-search?submit=1"
QUERIES = [SearchQuery("title", "harry"), SearchQuery("author", "rowling")]


@pytest.fixture()
def catalog(config, fetcher):
    fetcher.pages[f"{BASE}/extended-search"] = SEARCH_FORM
    return CatalogService(config, fetcher=fetcher)


def test_search_replays_hidden_fields_and_submit(catalog, fetcher):
    fetcher.pages[SUBMIT_URL] = results_page([record("1")])

    catalog.search(QUERIES)

    method, url, data = fetcher.requests[-1]
    assert (method, url) == ("POST", SUBMIT_URL)
    assert data == [
        ("id1_hf_0", ""),
        ("wicket:token", "abc"),
        ("searchButton", "Search"),
        ("title", "harry"),
        ("author", "rowling"),
    ]


def test_search_posts_query_values_unchanged(catalog, fetcher):
    fetcher.pages[SUBMIT_URL] = results_page([record("1")])

    catalog.search([SearchQuery("title", " harry potter ")])

    assert fetcher.requests[-1][2][-1] == ("title", " harry potter ")


def test_search_reads_total_from_counter_text(catalog, fetcher):
    fetcher.pages[SUBMIT_URL] = results_page([record("1"), record("2")], counter="1-10 von 42")

    result = catalog.search(QUERIES)

    assert result.total_count == 42
    assert result.page == 1
    assert [r.id for r in result.results] == ["1", "2"]


@pytest.mark.parametrize("counter", ["Treffer 1-10 of 7", "1-10 av 7"])
def test_search_counter_in_other_languages(catalog, fetcher, counter):
    fetcher.pages[SUBMIT_URL] = results_page([record("1")], counter=counter)

    assert catalog.search(QUERIES).total_count == 7


def test_search_prefers_meta_counter(catalog, fetcher):
    fetcher.pages[SUBMIT_URL] = results_page(
        [record("1")], counter="1-10 of 42", head='<meta name="WT.oss_r" content="118">'
    )

    assert catalog.search(QUERIES).total_count == 118


def test_search_without_counter_has_zero_total(catalog, fetcher):
    fetcher.pages[SUBMIT_URL] = results_page([record("1")], counter="")

    assert catalog.search(QUERIES).total_count == 0


def test_search_result_summary_and_inline_cover(catalog, fetcher):
    fetcher.pages[SUBMIT_URL] = results_page(
        [
            record(
                "9",
                title="Harry Potter",
                authors=("Rowling, J. K.", "Fritz, Klaus"),
                year="1998",
                cover='<img src="/web/arena/covers/9.jpg"/>',
            )
        ]
    )

    (result,) = catalog.search(QUERIES).results

    assert result.inner_html == "<b>Harry Potter</b><br>Rowling, J. K., Fritz, Klaus 1998"
    assert result.cover == f"{BASE}/covers/9.jpg"
    assert result.status == SearchResultStatus.UNKNOWN
    # inline data only, nothing fetched after the search itself
    assert fetcher.requests[-1][1] == SUBMIT_URL


def test_placeholder_cover_is_loaded_through_ajax_endpoint(catalog, fetcher):
    fetcher.pages[SUBMIT_URL] = results_page(
        [record("3", cover='<img src="/images/indicator.gif"/>')],
        scripts=[ajax_script(r"/web/arena/ajax/cover?id\x3d3", "cover_3")],
    )
    fetcher.pages[f"{BASE}/ajax/cover?id=3"] = envelope('<img src="covers/3.jpg?size=l&amp;v=2" />')

    (result,) = catalog.search(QUERIES).results

    assert result.cover == f"{HOST}/web/covers/3.jpg?size=l&v=2"
    assert result.cover.startswith("https://")


def test_missing_cover_without_endpoint(catalog, fetcher):
    fetcher.pages[SUBMIT_URL] = results_page([record("3", cover='<img src="/images/indicator.gif"/>')])

    (result,) = catalog.search(QUERIES).results

    assert result.cover is None


@pytest.mark.parametrize(
    "css_class, expected",
    [
        ("arena-available", SearchResultStatus.GREEN),
        ("arena-notavailable", SearchResultStatus.RED),
        ("arena-unknown", SearchResultStatus.UNKNOWN),
    ],
)
def test_availability_from_ajax_endpoint(catalog, fetcher, css_class, expected):
    fetcher.pages[SUBMIT_URL] = results_page(
        [record("4")],
        scripts=[ajax_script("/web/arena/ajax/status/4", "status_4")],
    )
    fetcher.pages[f"{BASE}/ajax/status/4"] = envelope(
        f'<div class="arena-record-availability"><a href="#"><span class="{css_class}">x</span></a></div>'
    )

    (result,) = catalog.search(QUERIES).results

    assert result.status == expected


def test_single_hit_redirect_builds_one_result(catalog, fetcher):
    fetcher.pages[SUBMIT_URL] = """
    <html><head><script type="text/javascript">
    window.location.replace('/web/arena/results?p_p_id\\x3dsearchResult\\x26id\\x3d77');
    </script></head><body></body></html>
    """
    fetcher.pages[f"{BASE}/results?p_p_id=searchResult&id=77"] = """
    <html><body><div class="arena-catalogue-detail">
      <div class="arena-detail-title"><span>Title:</span><span>The only hit</span></div>
      <div class="arena-detail-author"><span class="arena-value">Solo, Han</span></div>
      <div class="arena-detail-year"><span class="arena-value">1977</span></div>
      <img class="arena-detail-cover" src="covers/77.jpg"/>
      <span class="arena-record-id">77</span>
    </div></body></html>
    """

    result = catalog.search(QUERIES)

    assert result.total_count == 1
    assert result.page == 1
    (hit,) = result.results
    assert hit.id == "77"
    assert hit.inner_html == "<b>The only hit</b><br>Solo, Han 1977"
    assert hit.cover == f"{BASE}/covers/77.jpg"


def test_empty_result_without_redirect(catalog, fetcher):
    fetcher.pages[SUBMIT_URL] = "<html><body><p>No hits</p></body></html>"

    result = catalog.search(QUERIES)

    assert result.results == []
    assert result.total_count == 0


def test_page_turn_requires_search(config, fetcher):
    with pytest.raises(NoActiveSearch):
        CatalogService(config, fetcher=fetcher).search_get_page(2)


def test_page_turn_to_current_page_is_offline(catalog, fetcher):
    fetcher.pages[SUBMIT_URL] = results_page([record("1"), record("2")], window=(1, 2, 3), current=1)
    first = catalog.search(QUERIES)
    requests_before = len(fetcher.requests)

    again = catalog.search_get_page(1)

    assert len(fetcher.requests) == requests_before
    assert again.results == first.results
    assert again.total_count == first.total_count


def test_page_turn_to_visible_page(catalog, fetcher):
    fetcher.pages[SUBMIT_URL] = results_page([record("1")], window=(1, 2, 3), current=1)
    fetcher.pages[page_url(3)] = results_page([record("21")], window=(1, 2, 3), current=3)
    catalog.search(QUERIES)

    result = catalog.search_get_page(3)

    assert result.page == 3
    assert [r.id for r in result.results] == ["21"]
    assert fetcher.urls()[-1] == page_url(3)


def test_page_turn_logs_page_size(catalog, fetcher, caplog):
    fetcher.pages[SUBMIT_URL] = results_page([record("1")], window=(1, 2), current=1)
    fetcher.pages[page_url(2)] = results_page([record("11"), record("12")], window=(1, 2), current=2)
    catalog.search(QUERIES)

    with caplog.at_level("INFO", logger="arena_classes"):
        catalog.search_get_page(2)

    assert "Page 2 shows 2 of 42 hits" in caplog.text


def test_page_turn_walks_the_window_forward(catalog, fetcher):
    fetcher.pages[SUBMIT_URL] = results_page([record("1")], window=(1, 2, 3, 4, 5), current=1)
    fetcher.pages[page_url(5)] = results_page([record("41")], window=(3, 4, 5, 6, 7), current=5)
    fetcher.pages[page_url(7)] = results_page([record("61")], window=(5, 6, 7, 8, 9), current=7)
    fetcher.pages[page_url(9)] = results_page([record("81")], window=(7, 8, 9, 10, 11), current=9)
    fetcher.pages[page_url(10)] = results_page([record("91")], window=(8, 9, 10, 11, 12), current=10)
    catalog.search(QUERIES)

    result = catalog.search_get_page(10)

    assert fetcher.urls()[-4:] == [page_url(5), page_url(7), page_url(9), page_url(10)]
    assert result.page == 10
    assert [r.id for r in result.results] == ["91"]


def test_page_turn_then_back(catalog, fetcher):
    fetcher.pages[SUBMIT_URL] = results_page([record("1")], window=(1, 2, 3, 4, 5), current=1)
    fetcher.pages[page_url(5)] = results_page([record("41")], window=(3, 4, 5, 6, 7), current=5)
    fetcher.pages[page_url(7)] = results_page([record("61")], window=(5, 6, 7, 8, 9), current=7)
    fetcher.pages[page_url(3)] = results_page([record("21")], window=(1, 2, 3, 4, 5), current=3)
    fetcher.pages[page_url(2)] = results_page([record("11")], window=(1, 2, 3, 4, 5), current=2)
    catalog.search(QUERIES)

    assert catalog.search_get_page(7).page == 7
    result = catalog.search_get_page(2)

    assert [r.id for r in result.results] == ["11"]
    assert fetcher.urls()[-3:] == [page_url(5), page_url(3), page_url(2)]


def test_page_turn_terminates_when_window_never_moves(catalog, fetcher):
    stuck = results_page([record("1")], window=(1, 2, 3), current=1)
    fetcher.pages[SUBMIT_URL] = stuck
    fetcher.pages[page_url(3)] = results_page([record("1")], window=(1, 2, 3), current=1)
    catalog.search(QUERIES)

    with pytest.raises(MalformedMarkup):
        catalog.search_get_page(9)

    assert fetcher.urls().count(page_url(3)) == 1


def test_page_turn_rejects_page_zero(catalog, fetcher):
    fetcher.pages[SUBMIT_URL] = results_page([record("1")])
    catalog.search(QUERIES)

    with pytest.raises(ValueError):
        catalog.search_get_page(0)


def test_new_search_replaces_session(catalog, fetcher):
    fetcher.pages[SUBMIT_URL] = [
        results_page([record("1")], window=(1, 2), current=1),
        results_page([record("100")], window=(1, 2), current=1),
    ]
    catalog.search(QUERIES)
    catalog.search([SearchQuery("title", "other")])

    assert [r.id for r in catalog.search_get_page(1).results] == ["100"]
