"""
Everything the pipeline raises.

FetchError goes up to whoever asked for the page. ParseError and
TypeCoercionError are caught by the Harvest / normalize and recorded
against the race, target or row they came from.
"""


class HarvestError(Exception):
    pass


class FetchError(HarvestError):
    """
    Network or http failure for a path. status is None when no response
    came back at all (timeout, connection error, robots.txt)
    """

    def __init__(self, path, status=None, reason=None):
        self.path = path
        self.status = status
        self.reason = reason
        msg = f"cannot fetch {path}"
        if status is not None:
            msg += f" (status {status})"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ParseError(HarvestError):
    """
    Expected markup missing or malformed
    """

    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot parse {path}: {reason}")


class RowParseError(ParseError):
    pass


class TypeCoercionError(HarvestError):

    def __init__(self, field, value, reason=None):
        self.field = field
        self.value = value
        self.reason = reason
        msg = f"cannot coerce {field}={value!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class ScrapeCancelled(HarvestError):
    pass
