"""
A fake fetcher, so nothing here touches the network
"""
import pytest

from pcsharvest.errors import FetchError


class FakeFetcher:
    """
    Returns pages from a dict of path -> html, FetchError(404) otherwise.
    Anything in errors is raised instead.
    """

    def __init__(self, pages=None, errors=None):
        self.pages = dict(pages or {})
        self.errors = dict(errors or {})
        self.calls = []

    def fetch(self, path):
        self.calls.append(path)
        if path in self.errors:
            raise self.errors[path]
        if path not in self.pages:
            raise FetchError(path, status=404, reason='Not Found')
        return self.pages[path]


@pytest.fixture
def fetcher():
    return FakeFetcher()
