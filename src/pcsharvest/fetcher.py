"""
The one way anything gets a page from the site.

A single RateLimiter is shared by every fetch, so whatever calls fetch
(one loop or a pool of threads) there is only ever one request in
flight, and requests are at least min_interval seconds apart.
"""
import threading
import time
from urllib.robotparser import RobotFileParser

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .constants import LOG, PCS_MAIN
from .errors import FetchError, ScrapeCancelled

USER_AGENT = "pcsharvest/0.1 (race results research)"


class RateLimiter:
    """
    Use as a context manager around each request:

    >>> limiter = RateLimiter(1.5)
    >>> with limiter:
            resp = session.get(url)

    Holds a lock for the whole request, and sleeps on entry until
    min_interval has passed since the last request finished.
    """

    def __init__(self, min_interval=1.0, clock=time.monotonic,
                 sleep=time.sleep):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last = None

    def __enter__(self):
        self._lock.acquire()
        if self._last is not None:
            wait = self.min_interval - (self._clock() - self._last)
            if wait > 0:
                LOG.debug(f'rate limit: sleeping {wait:.2f}s')
                self._sleep(wait)
        return self

    def __exit__(self, *exc):
        self._last = self._clock()
        self._lock.release()
        return False


def make_session(retries=3, backoff=1.0):
    """
    requests Session that retries connection errors and 429/5xx itself
    """
    retry = Retry(
        total=retries,
        backoff_factor=backoff,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=('GET',),
        respect_retry_after_header=True,
    )
    session = requests.Session()
    session.headers['User-Agent'] = USER_AGENT
    session.mount('https://', HTTPAdapter(max_retries=retry))
    session.mount('http://', HTTPAdapter(max_retries=retry))

    return session


class PageFetcher:

    def __init__(self, limiter=None, base_url=PCS_MAIN, timeout=30,
                 session=None, retries=3, respect_robots=True,
                 cancel_event=None):
        """
        Fetch relative paths off base_url, eg

        >>> fetcher = PageFetcher(RateLimiter(2))
        >>> html = fetcher.fetch('race/tour-de-france/2021/result')

        Pass a threading.Event as cancel_event to be able to stop a long
        run: once it is set every fetch raises ScrapeCancelled.
        """
        if limiter is None:
            limiter = RateLimiter()

        self.limiter = limiter
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session if session is not None else make_session(retries)
        self.respect_robots = respect_robots
        self.cancel_event = cancel_event
        self.n_requests = 0
        self._robots = None

    def url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def fetch(self, path):
        """
        Return the page text for path, or raise FetchError
        """
        self._check_cancelled()

        if self.respect_robots and not self._allowed(path):
            raise FetchError(path, reason='disallowed by robots.txt')

        resp = self._get(path)

        if not resp.ok:
            raise FetchError(path, status=resp.status_code,
                             reason=resp.reason)

        LOG.info(f'fetched {path}')

        return resp.text

    def _get(self, path):
        self._check_cancelled()

        with self.limiter:
            self.n_requests += 1
            try:
                return self.session.get(self.url(path), timeout=self.timeout)
            except requests.RequestException as e:
                raise FetchError(path, reason=str(e)) from e

    def _check_cancelled(self):
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise ScrapeCancelled('cancelled before fetch')

    def _allowed(self, path):
        """
        Check path against robots.txt, read once per fetcher. A missing
        robots.txt allows everything.
        """
        if self._robots is None:
            self._robots = RobotFileParser()
            try:
                resp = self._get('robots.txt')
            except FetchError as e:
                LOG.warning(f'cannot read robots.txt, assuming allowed: {e}')
                resp = None

            if resp is not None and resp.ok:
                self._robots.parse(resp.text.splitlines())
            else:
                self._robots.allow_all = True

        return self._robots.can_fetch(USER_AGENT, self.url(path))
