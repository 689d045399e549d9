import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest

# Ensure the repository root is on sys.path for direct pytest runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from place_bridge.config import load_config
from place_bridge.transport import HttpClient, HttpResponse


class FakeHttp(HttpClient):
    """Routes GETs to a handler and records every call."""

    def __init__(self, handler: Callable[[str], HttpResponse]):
        self.handler = handler
        self.calls: List[Tuple[str, Dict[str, str], bool]] = []

    def get(self, url: str, headers: Optional[Dict[str, str]] = None,
            allow_redirects: bool = True) -> HttpResponse:
        self.calls.append((url, dict(headers or {}), allow_redirects))
        return self.handler(url)


def text_response(text: str, status: int = 200, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
    return HttpResponse(status=status, headers=headers or {}, body=text.encode("utf-8"))


@pytest.fixture
def cfg():
    return load_config(ROOT / "data" / "config.default.json")
