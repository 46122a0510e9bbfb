"""
tests/test_fetcher.py
=====================
Rate limiting, errors and cancellation in the PageFetcher, with a fake
requests session.
"""
import threading
import time

import pytest
import requests

from pcsharvest.errors import FetchError, ScrapeCancelled
from pcsharvest.fetcher import PageFetcher, RateLimiter


class FakeResponse:

    def __init__(self, text='', status_code=200, reason='OK'):
        self.text = text
        self.status_code = status_code
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400


class FakeSession:

    def __init__(self, pages=None, delay=0):
        self.pages = pages or {}
        self.delay = delay
        self.urls = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def get(self, url, timeout=None):
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            self.urls.append(url)
            if self.delay:
                time.sleep(self.delay)
            page = self.pages.get(url)
            if isinstance(page, Exception):
                raise page
            if page is None:
                return FakeResponse(status_code=404, reason='Not Found')
            return FakeResponse(page)
        finally:
            with self._lock:
                self.in_flight -= 1


class FakeClock:

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, secs):
        self.sleeps.append(secs)
        self.now += secs


BASE = 'https://pcs.test'


def make_fetcher(pages, **kwargs):
    session = FakeSession({f'{BASE}/{k}': v for k, v in pages.items()})
    kwargs.setdefault('respect_robots', False)
    kwargs.setdefault('limiter', RateLimiter(0))
    return PageFetcher(base_url=BASE, session=session, **kwargs), session


class TestRateLimiter:

    def test_spacing(self):
        clock = FakeClock()
        limiter = RateLimiter(2, clock=clock, sleep=clock.sleep)

        with limiter:
            pass
        clock.now += 0.5
        with limiter:
            pass
        clock.now += 5
        with limiter:
            pass

        assert clock.sleeps == [1.5]

    def test_released_after_error(self):
        limiter = RateLimiter(0)
        with pytest.raises(ValueError):
            with limiter:
                raise ValueError('boom')
        with limiter:
            pass


class TestPageFetcher:

    def test_fetch(self):
        fetcher, session = make_fetcher({'race/a/2021': '<html>a</html>'})
        assert fetcher.fetch('race/a/2021') == '<html>a</html>'
        assert session.urls == [f'{BASE}/race/a/2021']

    def test_http_error(self):
        fetcher, _ = make_fetcher({})
        with pytest.raises(FetchError) as e:
            fetcher.fetch('race/a/2021')
        assert e.value.status == 404
        assert e.value.path == 'race/a/2021'

    def test_network_error(self):
        fetcher, _ = make_fetcher({'race/a/2021': requests.ConnectionError('down')})
        with pytest.raises(FetchError) as e:
            fetcher.fetch('race/a/2021')
        assert e.value.status is None

    def test_cancelled(self):
        event = threading.Event()
        fetcher, session = make_fetcher({'race/a/2021': 'x'}, cancel_event=event)
        event.set()
        with pytest.raises(ScrapeCancelled):
            fetcher.fetch('race/a/2021')
        assert session.urls == []

    def test_robots_disallowed(self):
        fetcher, session = make_fetcher({
            'robots.txt': 'User-agent: *\nDisallow: /race/\n',
            'races.php?year=2021': 'index',
        }, respect_robots=True)

        assert fetcher.fetch('races.php?year=2021') == 'index'
        with pytest.raises(FetchError):
            fetcher.fetch('race/a/2021')
        # robots.txt only read once
        assert session.urls.count(f'{BASE}/robots.txt') == 1

    def test_no_robots_allows_all(self):
        fetcher, _ = make_fetcher({'race/a/2021': 'x'}, respect_robots=True)
        assert fetcher.fetch('race/a/2021') == 'x'

    def test_one_request_at_a_time(self):
        pages = {f'race/r{i}/2021': 'x' for i in range(8)}
        fetcher, session = make_fetcher(pages)
        session.delay = 0.01

        threads = [threading.Thread(target=fetcher.fetch, args=(p,)) for p in pages]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(session.urls) == 8
        assert session.max_in_flight == 1
        assert fetcher.n_requests == 8
