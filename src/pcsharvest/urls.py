import re

"""
PCS paths are all relative to PCS_MAIN and built here, eg:

>>> make_index_url(2021, 1)
'races.php?year=2021&circuit=1&class=&filter=Filter'

>>> make_result_url('paris-roubaix', 2021)
'race/paris-roubaix/2021/result'

>>> make_result_url('tour-de-france', 2021, 4)
'race/tour-de-france/2021/stage-4/result'

>>> parse_result_url('race/tour-de-france/2021/stage-4/result')
('tour-de-france', 2021, 4)

Race links on the index page can carry a trailing status segment
when the race has been cancelled, eg 'race/some-race/2021/cancelled'
"""

INDEX_URL = "races.php?year={}&circuit={}&class=&filter=Filter"

RACE_LINK_RE = re.compile(
    r"^/?race/(?P<slug>[^/?#]+)/(?P<year>\d{4})(?:/(?P<status>[^/?#]+))?/?$")

RESULT_RE = re.compile(
    r"^/?race/(?P<slug>[^/?#]+)/(?P<year>\d{4})"
    r"(?:/stage-(?P<stage>\d+))?/result/?$")


def make_index_url(year, circuit):
    """
    The races.php listing for a year and circuit
    """
    return INDEX_URL.format(year, circuit)


def make_race_url(slug, year):
    """
    The race overview page, which has the stage selector
    """
    return f"race/{slug}/{year}"


def make_result_url(slug, year, stage_no=None):
    """
    One day races have no stage segment at all, not even stage-1
    """
    race_url = make_race_url(slug, year)

    if stage_no is None:
        return "/".join([race_url, 'result'])

    return "/".join([race_url, f"stage-{stage_no}", 'result'])


def parse_race_link(href):
    """
    Return (slug, year, status) for a race link, or None if it isn't one.
    status is None unless there is a trailing segment.
    """
    if not href:
        return None

    href = href.split("procyclingstats.com")[-1]
    match = RACE_LINK_RE.match(href)

    if match is None:
        return None

    return match['slug'], int(match['year']), match['status']


def parse_result_url(path):
    """
    Inverse of make_result_url
    """
    match = RESULT_RE.match(path)

    if match is None:
        raise ValueError(f"not a result path: {path}")

    stage = match['stage']

    return (match['slug'], int(match['year']),
            int(stage) if stage is not None else None)
