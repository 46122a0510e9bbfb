"""
RaceRef:
    source        : a link on the races.php index page
    made by       : index.list_races()
    key           : (race_slug, year)

StageTarget:
    source        : RaceRef plus the stage count off the race page
    made by       : stages.resolve_stages()
    one per stage, stage_number None for a one day race
    path          : the result page, see urls.make_result_url

Rank:
    the rank cell is a number for finishers, otherwise a status token
    (DNF, DNS, OTL..) - coerced at the normalize boundary into
    NumericRank or StatusRank

Failure:
    anything skipped during a Harvest run, with why
"""
from dataclasses import dataclass
from typing import Optional, Union

from .urls import make_result_url


@dataclass(frozen=True)
class RaceRef:
    race_slug: str
    year: int
    is_cancelled: bool = False

    @property
    def key(self):
        return (self.race_slug, self.year)


@dataclass(frozen=True)
class StageTarget:
    race_slug: str
    year: int
    stage_number: Optional[int] = None

    @property
    def is_one_day(self):
        return self.stage_number is None

    @property
    def race_type(self):
        return 'one-day' if self.is_one_day else 'stage'

    @property
    def key(self):
        return (self.race_slug, self.year, self.stage_number)

    @property
    def path(self):
        return make_result_url(self.race_slug, self.year, self.stage_number)


@dataclass(frozen=True)
class NumericRank:
    value: int


@dataclass(frozen=True)
class StatusRank:
    token: str


Rank = Union[NumericRank, StatusRank]


@dataclass(frozen=True)
class Failure:
    stage: str    # 'index', 'stages', 'result' or 'normalize'
    key: tuple
    reason: str

    def __str__(self):
        key = "/".join(str(x) for x in self.key if x is not None)
        return f"{self.stage.ljust(9)} {key}: {self.reason}"
