"""
tests/test_urls.py
==================
Site path construction and parsing.
"""
import pytest

from pcsharvest.data_model import StageTarget
from pcsharvest.urls import (make_index_url, make_race_url, make_result_url,
                             parse_race_link, parse_result_url)


class TestMakeUrls:

    def test_index(self):
        assert make_index_url(2021, 1) == \
            'races.php?year=2021&circuit=1&class=&filter=Filter'

    def test_race(self):
        assert make_race_url('tour-de-france', 2021) == 'race/tour-de-france/2021'

    def test_one_day_result_has_no_stage(self):
        assert make_result_url('paris-roubaix', 2021) == 'race/paris-roubaix/2021/result'

    def test_stage_result(self):
        assert make_result_url('tour-de-france', 2021, 4) == \
            'race/tour-de-france/2021/stage-4/result'


class TestParseRaceLink:

    def test_plain(self):
        assert parse_race_link('race/tour-de-france/2021') == ('tour-de-france', 2021, None)

    def test_leading_slash(self):
        assert parse_race_link('/race/tour-de-france/2021') == ('tour-de-france', 2021, None)

    def test_status_segment(self):
        assert parse_race_link('/race/some-race/2021/cancelled') == \
            ('some-race', 2021, 'cancelled')

    def test_absolute_url(self):
        href = 'https://www.procyclingstats.com/race/paris-roubaix/2021'
        assert parse_race_link(href) == ('paris-roubaix', 2021, None)

    @pytest.mark.parametrize('href', [
        None, '', 'rider/tadej-pogacar', 'race/tour-de-france', 'team/uae/2021',
        'race/tour-de-france/2021/stage-1/result',
    ])
    def test_not_race_links(self, href):
        assert parse_race_link(href) is None


class TestRoundTrip:

    @pytest.mark.parametrize('key', [
        ('tour-de-france', 2021, 1),
        ('tour-de-france', 2021, 21),
        ('paris-roubaix', 2019, None),
        ('e3-saxo-classic', 2023, None),
    ])
    def test_target_path_parses_back(self, key):
        target = StageTarget(*key)
        assert parse_result_url(target.path) == key

    def test_not_a_result_path(self):
        with pytest.raises(ValueError):
            parse_result_url('race/tour-de-france/2021')
