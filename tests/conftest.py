# Shared pytest fixtures
from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest

from brc_navigator.semantic_search.search_client import SearchClient, SearchConfig
from brc_navigator.storage.local_storage import LocalStorage
from brc_navigator.store.data_store import DataStore

EVENT_HEADERS = ["Title", "Type", "UID"]
EVENT_ROWS = [
    ["Yoga", "yoga", "u1"],
    ["Fire Show", "perf", "u2"],
]


class FakeMessages:
    """Stands in for anthropic.Anthropic().messages."""

    def __init__(self, text: str = "", error: Exception | None = None, on_call=None):
        self.text = text
        self.error = error
        self.on_call = on_call
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.on_call is not None:
            self.on_call(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.text)])


class FakeAnthropic:
    def __init__(self, text: str = "", error: Exception | None = None, on_call=None):
        self.messages = FakeMessages(text, error, on_call)


class FakeResponse:
    def __init__(self, text: str = "", status_code: int = 200, reason: str = "OK",
                 content_type: str = "text/csv"):
        self.text = text
        self.status_code = status_code
        self.reason = reason
        self.headers = {"Content-Type": content_type}

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class FakeSession:
    def __init__(self, response: FakeResponse | None = None, error: Exception | None = None):
        self.response = response or FakeResponse()
        self.error = error
        self.urls: list[str] = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.response


def search_payload(*results, explanation: str = "Matched on type and title") -> str:
    return json.dumps({"results": list(results), "explanation": explanation})


@pytest.fixture()
def storage_path(tmp_path: Path) -> Path:
    return tmp_path / "state" / "local_storage.json"


@pytest.fixture()
def storage(storage_path: Path) -> LocalStorage:
    return LocalStorage(storage_path)


@pytest.fixture()
def fake_anthropic() -> FakeAnthropic:
    return FakeAnthropic(text=search_payload())


@pytest.fixture()
def search_client(fake_anthropic: FakeAnthropic) -> SearchClient:
    return SearchClient(SearchConfig(api_key="test-key", model="claude-test"), client=fake_anthropic)


@pytest.fixture()
def store(storage: LocalStorage, search_client: SearchClient) -> DataStore:
    return DataStore(storage, search_client)


@pytest.fixture()
def loaded_store(store: DataStore) -> DataStore:
    store.set_data(EVENT_HEADERS, EVENT_ROWS)
    return store
