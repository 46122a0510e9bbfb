"""
Run the whole thing: index -> stages -> results -> normalize
"""
import threading
from concurrent.futures import ThreadPoolExecutor

from .config import ScrapeConfig
from .constants import LOG
from .data_model import Failure
from .errors import FetchError, ParseError, ScrapeCancelled
from .fetcher import PageFetcher, RateLimiter
from .index import list_races
from .normalize import normalize
from .results import fetch_result
from .stages import resolve_stages


class Harvest:

    def __init__(self, config=None, fetcher=None, tiers=None,
                 metadata_parser=None):
        """
        Scrape results for the years and circuits in the config into a
        single DataFrame

        >>> hv = Harvest(ScrapeConfig(years={2021}, circuits={1}))
        >>> df = hv.run()

        Anything that could not be fetched or parsed is skipped and kept
        in hv.failures, values that could not be coerced are in
        hv.coercion_errors. Both are listed by
        >>> print(hv.summary())

        A run can be stopped from another thread with hv.cancel(), the
        table is then made from whatever was fetched before that.

        Pass a fetcher to use something other than a PageFetcher built
        from the config (anything with a fetch(path) method).
        """
        if config is None:
            config = ScrapeConfig()

        self.config = config
        self.tiers = tiers
        self.metadata_parser = metadata_parser
        self.cancel_event = threading.Event()

        if fetcher is None:
            fetcher = PageFetcher(
                RateLimiter(config.min_request_interval),
                base_url=config.base_url,
                timeout=config.timeout,
                retries=config.retries,
                respect_robots=config.respect_robots,
                cancel_event=self.cancel_event,
            )
        self.fetcher = fetcher

        self.races = []
        self.targets = []
        self.rows = []
        self.failures = []
        self.coercion_errors = []
        self.cancelled = False
        self.df = None

    def run(self):
        """
        Returns the normalized DataFrame, also kept as self.df
        """
        try:
            self.index_races()
            self.expand_stages()
            self.fetch_results()
        except ScrapeCancelled:
            self.cancelled = True
            LOG.warning(f'cancelled, keeping {len(self.rows)} rows so far')

        self.df = normalize(self.rows, tiers=self.tiers,
                            errors=self.coercion_errors)

        for line in self.summary().splitlines():
            LOG.info(line)

        return self.df

    def cancel(self):
        self.cancel_event.set()

    def _check_cancelled(self):
        if self.cancel_event.is_set():
            raise ScrapeCancelled('cancelled')

    def _skip(self, stage, key, err):
        failure = Failure(stage, key, str(err))
        LOG.warning(f'skipping {failure}')
        self.failures.append(failure)

    def index_races(self):
        seen = {ref.key for ref in self.races}

        for year in sorted(self.config.years):
            for circuit in sorted(self.config.circuits, key=str):
                self._check_cancelled()
                try:
                    refs = list_races(year, circuit, self.fetcher)
                except (FetchError, ParseError) as e:
                    self._skip('index', (year, circuit), e)
                    continue

                # a race can be listed under more than one circuit
                for ref in refs:
                    if ref.key not in seen:
                        seen.add(ref.key)
                        self.races.append(ref)

        return self.races

    def expand_stages(self):
        for ref in self.races:
            self._check_cancelled()
            try:
                targets = resolve_stages(ref, self.fetcher,
                                         self.config.excluded_targets)
            except (FetchError, ParseError) as e:
                self._skip('stages', ref.key, e)
                continue

            self.targets.extend(targets)

        return self.targets

    def _fetch_one(self, target):
        self._check_cancelled()
        try:
            rows, _ = fetch_result(target, self.fetcher, self.metadata_parser)
        except (FetchError, ParseError) as e:
            return None, e

        return rows, None

    def fetch_results(self):
        """
        Rows are added in target order, whatever the number of workers.
        The fetcher's rate limiter still only allows one request at a time.
        """
        if self.config.workers == 1:
            results = map(self._fetch_one, self.targets)
            self._collect(results)
        else:
            with ThreadPoolExecutor(self.config.workers) as pool:
                try:
                    self._collect(pool.map(self._fetch_one, self.targets))
                except ScrapeCancelled:
                    self.cancel()
                    raise

        return self.rows

    def _collect(self, results):
        for target, (rows, err) in zip(self.targets, results):
            if err is not None:
                self._skip('result', target.key, err)
                continue
            self.rows.extend(rows)

    def summary(self):
        """
        What was done and everything that was skipped, and why
        """
        pad = 10
        years = ", ".join(str(x) for x in sorted(self.config.years))
        circuits = ", ".join(str(x) for x in sorted(self.config.circuits, key=str))

        out = [
            f"harvest {years} (circuits {circuits})",
            f" {'races'.ljust(pad)}: {len(self.races)}",
            f" {'targets'.ljust(pad)}: {len(self.targets)}",
            f" {'rows'.ljust(pad)}: {len(self.rows)}",
            f" {'skipped'.ljust(pad)}: {len(self.failures)}",
        ]
        out.extend(f"  {failure}" for failure in self.failures)

        out.append(f" {'coercion'.ljust(pad)}: {len(self.coercion_errors)}")
        out.extend(f"  {err}" for err in self.coercion_errors)

        if self.cancelled:
            out.append(" cancelled before completion, table is partial")

        return "\n".join(out)

    def __repr__(self):
        return (f"Harvest(years={sorted(self.config.years)}, "
                f"circuits={sorted(self.config.circuits, key=str)})")
