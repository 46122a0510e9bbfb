"""
Parsing the race info panel next to the results table, eg

    Date:               17 July 2021
    Start time:         12:10
    Distance:           248 km
    Avg. speed winner:  38.7 km/h
    Race category:      ME - Men Elite

Nothing in the markup ties a label to its value, so the default is to
pair them by position. If the markup changes pass a different strategy
to results.fetch_result - anything with a parse(soup) -> dict method.
"""
import re

PANEL_CLASSES = ('infolist', 'keyvalueList')


def snake_label(label):
    """
    'Avg. speed winner:' -> 'avg_speed_winner'
    """
    label = re.sub(r"[^0-9a-z]+", "_", label.strip().rstrip(':').lower())
    return label.strip('_')


def pair_nodes(nodes):
    """
    Ordered text nodes -> {label: value}, labels at even positions and
    values at odd ones. A trailing label with no value is dropped.
    """
    out = {}
    for label, value in zip(nodes[0::2], nodes[1::2]):
        key = snake_label(label)
        if key:
            out[key] = value.strip()

    return out


def find_panel(soup):
    for cl in PANEL_CLASSES:
        panel = soup.find('ul', class_=cl)
        if panel is not None:
            return panel


class PositionalPairing:
    """
    Every div in the panel's list items, in order, paired up by position
    """

    def text_nodes(self, soup):
        panel = find_panel(soup)
        if panel is None:
            return []

        nodes = []
        for li in panel.find_all('li'):
            nodes.extend(div.get_text(" ", strip=True)
                         for div in li.find_all('div', recursive=False))

        return nodes

    def parse(self, soup):
        return pair_nodes(self.text_nodes(soup))


class KeyedPairing:
    """
    For the layout where each item has div.title and div.value
    """

    def parse(self, soup):
        panel = find_panel(soup)
        if panel is None:
            return {}

        out = {}
        for li in panel.find_all('li'):
            title = li.find('div', class_='title')
            value = li.find('div', class_='value')
            if title is None or value is None:
                continue
            key = snake_label(title.get_text(strip=True))
            if key:
                out[key] = value.get_text(" ", strip=True)

        return out
