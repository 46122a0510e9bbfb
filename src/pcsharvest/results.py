"""
Fetch and parse one result page (a one day race or a single stage)
into rows, each carrying the race info and which race/stage it is.
"""
import re

from bs4 import BeautifulSoup

from .constants import LOG, PROFILE_DEFINITIONS
from .errors import RowParseError
from .metadata import PositionalPairing, snake_label

# result table headers -> row keys, anything else is just snake_cased
COLUMNS = {
    'rnk': 'rank',
    'pos': 'rank',
    'rider': 'rider',
    'team': 'team',
    'bib': 'bib',
    'age': 'age',
    'uci': 'uci_points',
    'pnt': 'pcs_points',
    'gc': 'gc_time',
    'timelag': 'time_lag',
    'time': 'elapsed_time_raw',
    'bonis': 'bonis',
    'bonus': 'bonis',
}

# substrings in the page title
STAGE_KINDS = {
    'TTT': 'ttt',
    'ITT': 'itt',
}


def column_name(header):
    key = snake_label(header)
    return COLUMNS.get(key, key)


def parse_table(table, path):
    """
    Return a list of row dicts from the results table.
    Columns with no header (icons etc) are left out.
    """
    head = table.find('thead')
    if head is None:
        head = table
    header_row = head.find('tr')
    if header_row is None:
        raise RowParseError(path, 'results table has no header row')

    headers = [column_name(th.get_text(" ", strip=True))
               for th in header_row.find_all('th')]
    if not any(headers):
        raise RowParseError(path, 'results table has no headers')

    body = table.find('tbody')
    if body is None:
        body = table
    rows = []
    for tr in body.find_all('tr'):
        cells = tr.find_all('td')
        if not cells:
            continue

        texts = [td.get_text().strip() for td in cells]
        texts += [None] * (len(headers) - len(texts))

        row = {}
        for name, text in zip(headers, texts):
            if name and name not in row:
                row[name] = text
        rows.append(row)

    if not rows:
        raise RowParseError(path, 'results table has no rows')

    return rows


def page_info(soup):
    """
    What kind of stage it was and the profile, from the title and icon
    """
    out = {'stage_kind': None, 'profile': None}

    title = soup.find('h1')
    if title is not None:
        text = title.get_text(" ", strip=True)
        kinds = [v for k, v in STAGE_KINDS.items() if k in text]
        out['stage_kind'] = kinds[0] if kinds else None

    icon = soup.find('span', class_='profile')
    if icon is not None:
        classes = [cl for cl in icon.get('class', [])
                   if re.fullmatch(r"p\d", cl)]
        if classes:
            out['profile'] = PROFILE_DEFINITIONS.get(classes[0])

    return out


def parse_result_page(html, target, metadata_parser=None):
    """
    Return (rows, metadata) for the page html of the passed StageTarget.
    Raises RowParseError if there is no usable results table, eg team
    time trials where the page has no table.
    """
    if metadata_parser is None:
        metadata_parser = PositionalPairing()

    soup = BeautifulSoup(html, 'html.parser')

    table = soup.find('table')
    if table is None:
        raise RowParseError(target.path, 'no results table on page')

    rows = parse_table(table, target.path)
    metadata = metadata_parser.parse(soup)

    tags = {
        'race_slug': target.race_slug,
        'year': target.year,
        'race_type': target.race_type,
        'stage_number': target.stage_number,
        'url': target.path,
        **page_info(soup),
    }

    out = [{**row, **metadata, **tags} for row in rows]

    return out, metadata


def fetch_result(target, fetcher, metadata_parser=None):
    """
    Fetch the result page for a StageTarget and parse it.

    >>> rows, meta = fetch_result(StageTarget('paris-roubaix', 2021), fetcher)
    >>> meta['distance']
    '257.7 km'
    """
    html = fetcher.fetch(target.path)
    rows, metadata = parse_result_page(html, target, metadata_parser)

    LOG.info(f'{target.path}: {len(rows)} rows')

    return rows, metadata
