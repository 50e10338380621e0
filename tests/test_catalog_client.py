import asyncio

import pytest
import requests

from services import catalog_client
from services.catalog_client import CatalogClient, FetchError

SONGS = {
    "songs": [
        {
            "id": "t1",
            "title": "First",
            "handle": "one",
            "display_name": "One",
            "image_url": "https://img/1.png",
            "audio_url": "",
            "is_liked": False,
            "upvote_count": 0,
        },
        {
            "id": "t2",
            "title": "Second",
            "handle": "two",
            "display_name": "Two",
            "image_url": "https://img/2.png",
            "audio_url": "https://x/b.mp3",
            "is_liked": True,
            "upvote_count": 12,
        },
    ]
}


class FakeResponse:
    def __init__(self, status_code=200, payload=None, invalid_json=False):
        self.status_code = status_code
        self.url = "https://feed.example/songs"
        self._payload = payload
        self._invalid_json = invalid_json

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1")
        return self._payload


@pytest.fixture
def fake_get(monkeypatch):
    calls = []

    def install(response=None, error=None):
        def get(url, headers=None, timeout=None):
            calls.append({"url": url, "headers": headers, "timeout": timeout})
            if error is not None:
                raise error
            return response
        monkeypatch.setattr(catalog_client.requests, "get", get)
        return calls

    return install


def test_fetch_decodes_songs(fake_get):
    calls = fake_get(FakeResponse(payload=SONGS))
    client = CatalogClient("https://feed.example/songs", timeout=5)

    catalog = asyncio.run(client.fetch_catalog())

    assert [t.id for t in catalog] == ["t1", "t2"]
    assert catalog[1].display_name == "Two"
    assert catalog[1].upvote_count == 12
    assert calls[0]["headers"] == {"Accept": "application/json"}
    assert calls[0]["timeout"] == 5


@pytest.mark.parametrize("status", [404, 500, 302])
def test_non_2xx_raises_fetch_error(fake_get, status):
    fake_get(FakeResponse(status_code=status, payload=SONGS))

    with pytest.raises(FetchError) as excinfo:
        CatalogClient().fetch_catalog_sync()

    assert excinfo.value.status_code == status


def test_transport_error_raises_fetch_error(fake_get):
    fake_get(error=requests.ConnectionError("unreachable"))

    with pytest.raises(FetchError) as excinfo:
        CatalogClient().fetch_catalog_sync()

    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


@pytest.mark.parametrize("response", [
    FakeResponse(invalid_json=True),
    FakeResponse(payload={"tracks": []}),
    FakeResponse(payload={"songs": [{"title": "no id"}]}),
    FakeResponse(payload={"songs": [{"id": "x"}]}),
    FakeResponse(payload={"songs": [{**SONGS["songs"][0], "is_liked": "false"}]}),
    FakeResponse(payload={"songs": [{**SONGS["songs"][0], "upvote_count": "12"}]}),
    FakeResponse(payload=[1, 2, 3]),
])
def test_bad_payload_raises_fetch_error(fake_get, response):
    fake_get(response)

    with pytest.raises(FetchError):
        CatalogClient().fetch_catalog_sync()


def test_invalid_scheme_fails_before_request(fake_get):
    calls = fake_get(FakeResponse(payload=SONGS))

    with pytest.raises(FetchError):
        CatalogClient("ftp://feed.example/songs").fetch_catalog_sync()

    assert calls == []


def test_empty_feed_is_not_an_error(fake_get):
    fake_get(FakeResponse(payload={"songs": []}))

    assert len(CatalogClient().fetch_catalog_sync()) == 0
