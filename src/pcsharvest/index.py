"""
Races for a year and circuit, off the races.php listing
"""
from bs4 import BeautifulSoup

from .constants import LOG
from .data_model import RaceRef
from .urls import make_index_url, parse_race_link


def list_races(year, circuit, fetcher):
    """
    Return the RaceRefs listed for the year and circuit, cancelled
    races left out. FetchError is not caught here.

    >>> list_races(2021, 1, fetcher)
    [RaceRef(race_slug='santos-tour-down-under', year=2021, ...), ...]
    """
    html = fetcher.fetch(make_index_url(year, circuit))

    refs = parse_race_links(html)
    out = [ref for ref in refs if not ref.is_cancelled]

    LOG.info(f'{year} circuit {circuit}: {len(out)} races, '
             f'{len(refs) - len(out)} cancelled')

    return out


def parse_race_links(html):
    """
    All race links in the listing, including cancelled ones.
    A race listed twice is only returned once, in first seen order. If
    one of the listings is live, the live one is kept.
    """
    soup = BeautifulSoup(html, 'html.parser')

    # links outside the table (menus etc) point at other races
    container = soup.find('tbody')
    if container is None:
        container = soup

    out, seen = [], {}
    for a in container.find_all('a'):
        parsed = parse_race_link(a.get('href'))
        if parsed is None:
            continue

        slug, year, status = parsed
        ref = RaceRef(slug, year, is_cancelled=status is not None)

        if ref.key in seen:
            i = seen[ref.key]
            if out[i].is_cancelled and not ref.is_cancelled:
                out[i] = ref
            continue

        seen[ref.key] = len(out)
        out.append(ref)

    return out
