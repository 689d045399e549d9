from __future__ import annotations


class PlaceBridgeError(Exception):
    """Expected failure while converting a single entry."""


class InvalidInput(PlaceBridgeError):
    """Malformed request (direction or entries); aborts the whole batch."""


class UnresolvedSource(PlaceBridgeError):
    pass


class SearchFailure(PlaceBridgeError):
    pass


class TransportError(PlaceBridgeError):
    pass


class NoSearchResults(PlaceBridgeError):
    pass


class NoCandidateSelected(PlaceBridgeError):
    pass


def error_message(exc: BaseException) -> str:
    msg = str(exc)
    return msg if msg else "알 수 없는 오류"
