import http.client
import io
import urllib.error
from email.message import Message
from unittest.mock import MagicMock, patch

import pytest

from place_bridge.errors import TransportError
from place_bridge.models import KAKAO_TO_NAVER, SourceEntry
from place_bridge.pipeline import PlaceConversionPipeline
from place_bridge.transport import HttpClient, HttpResponse, UrllibHttpClient, resolve_redirect_chain

from conftest import FakeHttp, text_response


def _redirect(location):
    return HttpResponse(status=302, headers={"Location": location})


def test_redirect_chain_collects_every_hop():
    routes = {
        "https://naver.me/abc": _redirect("https://map.naver.com/p/entry/place/1?lat=37.5&lng=127.0"),
        "https://map.naver.com/p/entry/place/1?lat=37.5&lng=127.0": _redirect("/p/entry/place/1/home"),
        "https://map.naver.com/p/entry/place/1/home": text_response("<html></html>"),
    }
    http = FakeHttp(lambda url: routes[url])

    chain = resolve_redirect_chain(http, "https://naver.me/abc", 6, referer="https://map.naver.com/")

    assert chain == [
        "https://naver.me/abc",
        "https://map.naver.com/p/entry/place/1?lat=37.5&lng=127.0",
        "https://map.naver.com/p/entry/place/1/home",
    ]
    for _url, headers, allow_redirects in http.calls:
        assert headers == {"referer": "https://map.naver.com/"}
        assert allow_redirects is False


def test_redirect_chain_respects_hop_limit():
    counter = {"n": 0}

    def loop(url):
        counter["n"] += 1
        return _redirect(f"https://example.com/{counter['n']}")

    http = FakeHttp(loop)
    chain = resolve_redirect_chain(http, "https://example.com/0", 3)
    assert len(chain) == 3
    assert len(http.calls) == 3


def test_redirect_chain_stops_without_location():
    http = FakeHttp(lambda url: HttpResponse(status=301))
    assert resolve_redirect_chain(http, "https://naver.me/x", 6) == ["https://naver.me/x"]


def test_redirect_chain_stops_on_error_status():
    http = FakeHttp(lambda url: text_response("nope", status=404))
    assert resolve_redirect_chain(http, "https://naver.me/x", 6) == ["https://naver.me/x"]


def test_http_response_helpers():
    resp = HttpResponse(status=204, headers={"Content-Type": "text/plain"}, body="가".encode("utf-8"))
    assert resp.ok
    assert resp.header("content-type") == "text/plain"
    assert resp.text() == "가"
    assert not HttpResponse(status=302).ok


def test_urllib_client_returns_redirect_as_response():
    client = UrllibHttpClient("test-agent")
    hdrs = Message()
    hdrs["Location"] = "https://map.naver.com/p/entry/place/1"
    err = urllib.error.HTTPError("https://naver.me/x", 302, "Found", hdrs, io.BytesIO(b""))

    with patch.object(client._no_follow, "open", side_effect=err) as mock_open:
        resp = client.get("https://naver.me/x", headers={"Referer": "https://map.naver.com/"},
                          allow_redirects=False)

    assert resp.status == 302
    assert resp.header("location") == "https://map.naver.com/p/entry/place/1"
    req = mock_open.call_args[0][0]
    assert req.get_header("User-agent") == "test-agent"
    assert req.get_header("Referer") == "https://map.naver.com/"


def test_urllib_client_reads_success_body():
    client = UrllibHttpClient("test-agent", timeout=5.0)
    hdrs = Message()
    hdrs["Content-Type"] = "application/json; charset=utf-8"
    fake = MagicMock()
    fake.status = 200
    fake.headers = hdrs
    fake.read.return_value = b'{"place": []}'
    fake.__enter__.return_value = fake

    with patch.object(client._follow, "open", return_value=fake) as mock_open:
        resp = client.get("https://search.map.kakao.com/x")

    assert resp.ok
    assert resp.text() == '{"place": []}'
    assert mock_open.call_args.kwargs == {"timeout": 5.0}


def test_urllib_client_wraps_network_errors():
    client = UrllibHttpClient("test-agent")
    with patch.object(client._follow, "open", side_effect=urllib.error.URLError("dns failure")):
        with pytest.raises(TransportError):
            client.get("https://m.map.naver.com/search2/search.naver?query=x")


def test_urllib_client_wraps_truncated_reads():
    client = UrllibHttpClient("test-agent")
    with patch.object(client._follow, "open", side_effect=http.client.IncompleteRead(b"")):
        with pytest.raises(TransportError):
            client.get("https://search.map.kakao.com/x")


def test_urllib_client_wraps_unencodable_urls():
    client = UrllibHttpClient("test-agent")
    with patch.object(client._follow, "open", side_effect=UnicodeEncodeError("ascii", "가", 0, 1, "bad")):
        with pytest.raises(TransportError):
            client.get("https://search.map.kakao.com/x")


def test_http_response_unknown_charset_falls_back_to_utf8():
    resp = HttpResponse(status=200, body="{\"name\": \"카페\"}".encode("utf-8"), charset="x-bogus")
    assert resp.text() == "{\"name\": \"카페\"}"


def test_http_client_is_abstract():
    with pytest.raises(TypeError):
        HttpClient()


def test_convert_reports_truncated_response_as_failed_result(cfg):
    pipe = PlaceConversionPipeline(cfg)
    with patch.object(pipe.http._follow, "open", side_effect=http.client.IncompleteRead(b"")):
        result = pipe.convert(KAKAO_TO_NAVER, SourceEntry(index=1, name="x"), 300)

    assert result.ok is False
    assert result.error.startswith("요청 실패")
