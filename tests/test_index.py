"""
tests/test_index.py
===================
Race discovery off the races.php listing.
"""
import pytest

from pcsharvest.data_model import RaceRef
from pcsharvest.errors import FetchError
from pcsharvest.index import list_races, parse_race_links
from pcsharvest.urls import make_index_url

from pages import index_page


class TestListRaces:

    def test_cancelled_race_left_out(self, fetcher):
        fetcher.pages[make_index_url(2021, 1)] = index_page(
            '/race/tour-de-france/2021', '/race/some-race/2021/cancelled')

        races = list_races(2021, 1, fetcher)

        assert races == [RaceRef('tour-de-france', 2021, False)]
        assert fetcher.calls == [make_index_url(2021, 1)]

    def test_never_returns_cancelled(self, fetcher):
        fetcher.pages[make_index_url(2020, 1)] = index_page(
            'race/a/2020', 'race/b/2020/cancelled', 'race/c/2020',
            'race/d/2020/postponed', 'race/e/2020')

        races = list_races(2020, 1, fetcher)

        assert [r.race_slug for r in races] == ['a', 'c', 'e']
        assert not any(r.is_cancelled for r in races)

    def test_live_listing_wins_over_earlier_cancelled(self, fetcher):
        fetcher.pages[make_index_url(2021, 1)] = index_page(
            'race/x/2021/cancelled', 'race/y/2021', 'race/x/2021')

        races = list_races(2021, 1, fetcher)

        assert races == [RaceRef('x', 2021, False), RaceRef('y', 2021, False)]

    def test_no_links_is_empty(self, fetcher):
        fetcher.pages[make_index_url(1900, 99)] = '<html><table><tbody></tbody></table></html>'
        assert list_races(1900, 99, fetcher) == []

    def test_fetch_error_propagates(self, fetcher):
        with pytest.raises(FetchError) as e:
            list_races(2021, 1, fetcher)
        assert e.value.status == 404
        assert e.value.path == make_index_url(2021, 1)


class TestParseRaceLinks:

    def test_only_table_links(self):
        refs = parse_race_links(index_page('race/uae-tour/2021'))
        assert [r.race_slug for r in refs] == ['uae-tour']

    def test_whole_page_without_table(self):
        html = '<a href="race/uae-tour/2021">UAE</a><a href="rider/x">x</a>'
        assert parse_race_links(html) == [RaceRef('uae-tour', 2021)]

    def test_relisted_race_kept_once(self):
        refs = parse_race_links(index_page(
            'race/giro-d-italia/2021', 'race/uae-tour/2021', 'race/giro-d-italia/2021'))
        assert [r.race_slug for r in refs] == ['giro-d-italia', 'uae-tour']

    def test_same_slug_other_year_not_merged(self):
        refs = parse_race_links(index_page('race/giro-d-italia/2020', 'race/giro-d-italia/2021'))
        assert [r.key for r in refs] == [('giro-d-italia', 2020), ('giro-d-italia', 2021)]

    def test_cancelled_relisting_does_not_replace_live(self):
        refs = parse_race_links(index_page('race/x/2021', 'race/x/2021/cancelled'))
        assert refs == [RaceRef('x', 2021, False)]

    def test_cancelled_flag(self):
        refs = parse_race_links(index_page('race/some-race/2021/cancelled'))
        assert refs == [RaceRef('some-race', 2021, True)]
