import json
from dataclasses import dataclass, field, fields
from pathlib import Path

from .constants import PCS_MAIN


@dataclass
class ScrapeConfig:
    """
    What to scrape and how politely.

    excluded_targets are (race_slug, year, stage_number) tuples, with
    stage_number None for a one day race
    """
    years: set = field(default_factory=set)
    circuits: set = field(default_factory=lambda: {1})
    excluded_targets: set = field(default_factory=set)
    min_request_interval: float = 1.0
    timeout: float = 30
    retries: int = 3
    workers: int = 1
    base_url: str = PCS_MAIN
    respect_robots: bool = True

    def __post_init__(self):
        self.years = {int(x) for x in self.years}
        self.circuits = set(self.circuits)
        self.excluded_targets = {make_target_key(x)
                                 for x in self.excluded_targets}

        if self.min_request_interval < 0:
            raise ValueError('min_request_interval cannot be negative')
        if self.workers < 1:
            raise ValueError('need at least one worker')

    @classmethod
    def from_dict(cls, data):
        """
        Unknown keys are an error, so typos don't pass silently
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"unknown config keys: {sorted(unknown)}")

        return cls(**data)


def make_target_key(target):
    """
    Accepts a tuple / list, or a string like 'tour-de-france/2021/4'
    or 'paris-roubaix/2021'
    """
    if isinstance(target, str):
        target = target.strip('/').split('/')

    if len(target) == 2:
        slug, year = target
        stage = None
    elif len(target) == 3:
        slug, year, stage = target
    else:
        raise ValueError(f"cannot make a target from {target}")

    stage = int(stage) if stage not in (None, '', 'None') else None

    return (slug, int(year), stage)


def load_config(fpath):
    """
    Read a ScrapeConfig from a json file, eg
    {
        "years": [2021, 2022],
        "circuits": [1],
        "excluded_targets": [["tour-de-france", 2021, 2]],
        "min_request_interval": 2
    }
    """
    with open(Path(fpath).expanduser(), 'r') as fp:
        data = json.load(fp)

    return ScrapeConfig.from_dict(data)
