"""
Expand a race into one StageTarget per stage.

The race page has a select with an option per stage, eg
    <option>Stage 1 | Florence - Rimini</option>
    <option>Stage 2 (ITT)</option>
The biggest stage number found is the count. One day races have no
such options, so get a count of 1 and a single target with no stage.
"""
import re

from bs4 import BeautifulSoup

from .constants import LOG
from .data_model import StageTarget
from .urls import make_race_url

STAGE_RE = re.compile(r"\bstage\s*(\d+)", re.IGNORECASE)


def stage_count(html):
    """
    Highest 'Stage N' option label on the page, 1 if there are none
    """
    soup = BeautifulSoup(html, 'html.parser')

    numbers = []
    for option in soup.find_all('option'):
        match = STAGE_RE.search(option.get_text(" ", strip=True))
        if match:
            numbers.append(int(match.group(1)))

    return max(numbers) if numbers else 1


def make_targets(race_ref, count, excluded=()):
    """
    Targets for stages 1..count, or a single one day target if count is 1.
    excluded is a collection of (race_slug, year, stage_number) to skip,
    eg team time trials with no results table.
    """
    if count <= 1:
        targets = [StageTarget(race_ref.race_slug, race_ref.year)]
    else:
        targets = [StageTarget(race_ref.race_slug, race_ref.year, n)
                   for n in range(1, count + 1)]

    excluded = set(excluded)
    out = []
    for target in targets:
        if target.key in excluded:
            LOG.info(f'excluding {target.path}')
            continue
        out.append(target)

    return out


def resolve_stages(race_ref, fetcher, excluded=()):
    """
    Fetch the race page and return its StageTargets.
    FetchError goes to the caller, which should note it and move on.
    """
    html = fetcher.fetch(make_race_url(race_ref.race_slug, race_ref.year))
    count = stage_count(html)

    LOG.info(f'{race_ref.race_slug} {race_ref.year}: {count} stage(s)')

    return make_targets(race_ref, count, excluded)
