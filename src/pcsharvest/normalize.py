"""
Turn the parsed rows from every page into one consistent table.

Each transformation is its own function so it can be used (and tested)
on its own; normalize() applies them all. Values that cannot be coerced
are recorded as Failures and replaced with UNPARSEABLE, the row is kept.
"""
import numbers
import re
from datetime import datetime

import pandas as pd

from .constants import LOG, RACE_TIERS, DEFAULT_TIER, UNPARSEABLE
from .data_model import NumericRank, StatusRank, Failure
from .errors import TypeCoercionError

# ',,' is shown instead of a time for riders on the same time as the
# rider above
PLACEHOLDER_RE = re.compile(r"^\s*,,")
BONUS_RE = re.compile(r"(\d+)\s*(?:\"|″|''|s\b|sec)")
DATE_RE = re.compile(r"(\d{1,2})\s+([A-Za-z]+)\.?\s+(\d{4})")
NUMBER_RE = re.compile(r"-?\d+(?:[.,]\d+)?")

# always in the output, even when there are no rows
NORMALIZED_COLUMNS = [
    'race_slug', 'year', 'race_type', 'stage_number', 'race_tier',
    'rank', 'status', 'rank_raw', 'rider_name', 'elapsed_time',
    'elapsed_seconds', 'time_lag_seconds', 'bonus_seconds',
    'distance_km', 'avg_speed_kmh', 'date', 'date_raw',
]


def is_blank(value):
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() in ('', '-')
    return bool(pd.isna(value))


def is_placeholder(value):
    return isinstance(value, str) and PLACEHOLDER_RE.match(value) is not None


def coerce_rank(value):
    """
    '12' -> NumericRank(12), 'DNF' -> StatusRank('DNF')
    """
    if isinstance(value, numbers.Real) and not is_blank(value):
        return NumericRank(int(value))

    if is_blank(value):
        raise TypeCoercionError('rank', value, 'empty')

    text = value.strip().rstrip('.')

    if text.isdecimal():
        return NumericRank(int(text))

    if text.isalpha():
        return StatusRank(value.strip())

    raise TypeCoercionError('rank', value)


def strip_team(rider, team):
    """
    The rider cell comes with the team name stuck on the end:
    'Tadej PogačarUAE Team Emirates' -> 'Tadej Pogačar'

    NB this removes the team name wherever it appears, so would mangle
    a rider whose own name contains their team's name.
    """
    if is_blank(rider):
        return rider

    if is_blank(team):
        return rider.strip()

    return rider.replace(team, '').strip()


def fill_times(times):
    """
    Replace the ',,' placeholders with the last actual time above them.
    Placeholders before any actual time become None. Filling already
    filled times changes nothing.
    """
    last = None
    out = []
    for value in times:
        if is_placeholder(value):
            out.append(last)
            continue
        if not is_blank(value):
            last = value
        out.append(value)

    return pd.Series(out, index=times.index, dtype=object)


def parse_duration(value):
    """
    '4:12:34' or '12:34' -> seconds
    """
    if is_blank(value):
        return None

    parts = str(value).strip().lstrip('+').split(':')

    if len(parts) > 3 or not all(p.strip().isdecimal() for p in parts):
        raise TypeCoercionError('time', value)

    secs = 0
    for part in parts:
        secs = secs * 60 + int(part)

    return secs


def parse_lag(value):
    """
    '+1:23' -> 83. The leader and anyone without a lag get 0
    """
    if is_blank(value) or is_placeholder(value):
        return 0

    return parse_duration(value)


def parse_bonus(value):
    """
    Bonus seconds out of eg '10"', 'B 6s' or '4', 0 if there are none
    """
    if is_blank(value):
        return 0

    text = str(value)
    match = BONUS_RE.search(text)
    if match is None:
        match = re.fullmatch(r"\s*(\d+)\s*", text)

    if match is None:
        return 0

    return int(match.group(1))


def parse_date(value):
    """
    '17 July 2021' (or '17 Jul 2021, 12:10') -> date(2021, 7, 17)
    """
    if is_blank(value):
        return None

    match = DATE_RE.search(str(value))
    if match is None:
        raise TypeCoercionError('date', value)

    day, month, year = match.groups()
    for fmt in ("%d %B %Y", "%d %b %Y"):
        try:
            return datetime.strptime(f"{day} {month} {year}", fmt).date()
        except ValueError:
            continue

    raise TypeCoercionError('date', value, f'unknown month {month}')


def parse_int(value):
    if is_blank(value):
        return None
    if isinstance(value, numbers.Real):
        return int(value)
    if not str(value).strip().isdecimal():
        raise TypeCoercionError('int', value)
    return int(value)


def parse_number(value):
    """
    '248 km' -> 248.0, '38,7 km/h' -> 38.7
    """
    if is_blank(value):
        return None
    if isinstance(value, numbers.Real):
        return float(value)

    match = NUMBER_RE.search(str(value))
    if match is None:
        raise TypeCoercionError('number', value)

    return float(match.group().replace(',', '.'))


def classify_race(slug, tiers=None):
    """
    'Grand Tour', 'Monument' or 'Other'
    """
    if tiers is None:
        tiers = RACE_TIERS

    return tiers.get(slug, DEFAULT_TIER)


def _empty(df):
    return pd.Series([None] * len(df), index=df.index, dtype=object)


def _row_key(row, i):
    key = [row.get(k) for k in ('race_slug', 'year', 'stage_number')]
    return tuple(None if is_blank(x) else x for x in key) + (f"row {i}",)


def _coerce(df, source, target, func, errors, dtype=None, default=None):
    """
    df[target] = func(df[source]), value by value, recording failures
    """
    if source not in df:
        df[target] = default
        return

    values, bad = [], False
    for i, value in df[source].items():
        try:
            values.append(func(value))
        except TypeCoercionError as e:
            errors.append(Failure('normalize', _row_key(df.loc[i], i), str(e)))
            values.append(UNPARSEABLE)
            bad = True

    series = pd.Series(values, index=df.index, dtype=object)
    if dtype is not None and not bad:
        series = series.astype(dtype)

    df[target] = series


def split_ranks(df, errors):
    """
    rank column -> rank (Int64, missing for non-finishers) and status
    (the token, eg 'DNF', missing for finishers)
    """
    ranks, statuses = [], []
    column = df['rank'] if 'rank' in df else _empty(df)

    for i, value in column.items():
        try:
            rank = coerce_rank(value)
        except TypeCoercionError as e:
            errors.append(Failure('normalize', _row_key(df.loc[i], i), str(e)))
            ranks.append(None)
            statuses.append(UNPARSEABLE)
            continue

        if isinstance(rank, NumericRank):
            ranks.append(rank.value)
            statuses.append(None)
        else:
            ranks.append(None)
            statuses.append(rank.token)

    df['rank_raw'] = column
    df['rank'] = pd.Series(ranks, index=df.index, dtype=object).astype('Int64')
    df['status'] = pd.Series(statuses, index=df.index, dtype=object)


def _per_page(df, column, func):
    """
    Apply func to column separately for each result page
    """
    if 'url' not in df:
        return func(df[column])

    parts = [func(group[column])
             for _, group in df.groupby('url', sort=False, dropna=False)]

    return pd.concat(parts).reindex(df.index)


def normalize(rows, tiers=None, errors=None):
    """
    Rows (list of dicts or DataFrame) from results.fetch_result for any
    number of pages -> one DataFrame sorted by date.

    Pass a list as errors to collect a Failure for every value that
    could not be coerced.
    """
    if errors is None:
        errors = []

    df = rows.copy() if isinstance(rows, pd.DataFrame) else pd.DataFrame(list(rows))
    df = df.reset_index(drop=True)

    if df.empty:
        missing = [c for c in NORMALIZED_COLUMNS if c not in df]
        return df.reindex(columns=list(df.columns) + missing)

    split_ranks(df, errors)

    if 'rider' in df:
        teams = df['team'] if 'team' in df else _empty(df)
        df['rider_name'] = [strip_team(r, t) for r, t in zip(df['rider'], teams)]

    if 'elapsed_time_raw' in df:
        df['elapsed_time'] = _per_page(df, 'elapsed_time_raw', fill_times)
    else:
        df['elapsed_time'] = None

    _coerce(df, 'elapsed_time', 'elapsed_seconds', parse_duration, errors,
            dtype='Int64')
    _coerce(df, 'time_lag', 'time_lag_seconds', parse_lag, errors,
            dtype='Int64')
    _coerce(df, 'bonis', 'bonus_seconds', parse_bonus, errors,
            dtype='Int64', default=0)

    for column in ['year', 'stage_number', 'bib', 'age', 'uci_points',
                   'pcs_points']:
        _coerce(df, column, column, parse_int, errors, dtype='Int64')

    _coerce(df, 'distance', 'distance_km', parse_number, errors,
            dtype='Float64')
    _coerce(df, 'avg_speed_winner', 'avg_speed_kmh', parse_number, errors,
            dtype='Float64')

    # dates stay sortable: anything unparseable is NaT, text kept in date_raw
    df['date_raw'] = df['date'] if 'date' in df else None
    _coerce(df, 'date_raw', 'date', parse_date, errors)
    df['date'] = pd.to_datetime(
        df['date'].where(df['date'] != UNPARSEABLE), errors='coerce')

    if 'race_slug' in df:
        df['race_tier'] = [classify_race(slug, tiers) for slug in df['race_slug']]
    else:
        df['race_tier'] = DEFAULT_TIER

    df = df.sort_values('date', kind='mergesort', na_position='last')
    df = df.reset_index(drop=True)

    LOG.info(f'normalized {len(df)} rows, {len(errors)} coercion errors')

    return df
