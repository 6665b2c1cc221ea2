# tests/conftest.py
# SPDX-License-Identifier: Apache-2.0
"""Shared fixtures: an in-memory settings store and a mocked HTTP session."""

from __future__ import annotations

from typing import Any
from unittest.mock import Mock

import pytest

from anoma_explorer.services.indexer import IndexerClient
from anoma_explorer.services.settings_store import SettingsStore

INDEXER_URL = "http://indexer.test/v1/graphql"


def make_response(status_code: int = 200, json_body: Any = None, text: str = "") -> Mock:
    """A stand-in for `requests.Response`; `json_body=ValueError(...)` makes `.json()` raise."""
    resp = Mock()
    resp.status_code = status_code
    resp.text = text
    if isinstance(json_body, Exception):
        resp.json.side_effect = json_body
    else:
        resp.json.return_value = json_body
    return resp


@pytest.fixture
def http_session() -> Mock:
    session = Mock()
    session.headers = {}
    return session


@pytest.fixture
def client(http_session: Mock) -> IndexerClient:
    return IndexerClient(INDEXER_URL, timeout=7, connect_timeout=3, raw_timeout=20, session=http_session)


@pytest.fixture
def store() -> SettingsStore:
    """A fresh in-memory SQLite store per test."""
    return SettingsStore.from_url("sqlite://")


def sent_query(session: Mock) -> str:
    """The GraphQL text of the last POST made through `session`."""
    return session.post.call_args.kwargs["json"]["query"]
