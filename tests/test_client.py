"""Tests for the sync content store client."""
import json
import logging
from unittest.mock import Mock, patch

import pytest
import requests

from ebook_library.client import ContentStoreClient, build_params, build_query_url
from ebook_library.queries import QueryTag


def response(status_code=200, payload=None, text=""):
    mock = Mock()
    mock.status_code = status_code
    mock.text = text
    mock.json.return_value = payload
    return mock


def make_client(**kwargs):
    return ContentStoreClient(project_id="proj", dataset="production", **kwargs)


def test_build_query_url():
    assert build_query_url("proj", "production", "2023-05-03") == (
        "https://proj.apicdn.sanity.io/v2023-05-03/data/query/production"
    )
    assert build_query_url("proj", "staging", "2021-10-21", use_cdn=False) == (
        "https://proj.api.sanity.io/v2021-10-21/data/query/staging"
    )


def test_build_params_json_encodes_parameters():
    params = build_params(QueryTag.BOOK, {"slug": "intro"})

    assert "slug.current == $slug" in params["query"]
    assert params["$slug"] == json.dumps("intro")


def test_fetch_list_returns_documents_in_store_order():
    docs = [{"_id": "2"}, {"_id": "1"}]
    with make_client() as client:
        with patch.object(client.session, "get", return_value=response(payload={"result": docs})) as get:
            result = client.fetch_list(QueryTag.BOOKS)

    assert result == docs
    _, kwargs = get.call_args
    assert kwargs["params"]["query"].startswith('*[_type == "book"]')
    assert kwargs["timeout"] == 10


def test_fetch_list_server_error_returns_empty():
    with make_client() as client:
        with patch.object(client.session, "get", return_value=response(500, text="boom")):
            assert client.fetch_list(QueryTag.POSTS) == []


def test_fetch_list_transport_error_returns_empty():
    with make_client() as client:
        with patch.object(client.session, "get", side_effect=requests.exceptions.ConnectionError("down")):
            assert client.fetch_list(QueryTag.BOOKS) == []


def test_fetch_list_timeout_returns_empty():
    with make_client() as client:
        with patch.object(client.session, "get", side_effect=requests.exceptions.Timeout()):
            assert client.fetch_list(QueryTag.BOOKS) == []


def test_fetch_list_bad_body_returns_empty():
    bad_json = response()
    bad_json.json.side_effect = ValueError("not json")

    with make_client() as client:
        with patch.object(client.session, "get", return_value=bad_json):
            assert client.fetch_list(QueryTag.BOOKS) == []
        with patch.object(client.session, "get", return_value=response(payload={"result": {"_id": "x"}})):
            assert client.fetch_list(QueryTag.BOOKS) == []


def test_fetch_one_returns_document():
    doc = {"_id": "b1", "slug": {"current": "intro"}}
    with make_client() as client:
        with patch.object(client.session, "get", return_value=response(payload={"result": doc})) as get:
            result = client.fetch_one(QueryTag.BOOK, "intro")

    assert result == doc
    _, kwargs = get.call_args
    assert kwargs["params"]["$slug"] == '"intro"'


def test_fetch_one_not_found_returns_none():
    with make_client() as client:
        with patch.object(client.session, "get", return_value=response(payload={"result": None})):
            assert client.fetch_one(QueryTag.BOOK, "nonexistent") is None


def test_fetch_one_error_returns_none():
    with make_client() as client:
        with patch.object(client.session, "get", return_value=response(403, text="forbidden")):
            assert client.fetch_one(QueryTag.POST, "x") is None


def test_query_kind_mismatch_raises():
    with make_client() as client:
        with pytest.raises(ValueError):
            client.fetch_list(QueryTag.BOOK)
        with pytest.raises(ValueError):
            client.fetch_one(QueryTag.BOOKS, "x")


def test_token_uses_live_api_and_bearer_header():
    with make_client(token="secret") as client:
        assert client.url.startswith("https://proj.api.sanity.io/")
        assert client.session.headers["Authorization"] == "Bearer secret"


def test_body_without_result_is_logged_as_error(caplog):
    with make_client() as client:
        with patch.object(client.session, "get", return_value=response(payload={"ms": 3})):
            with caplog.at_level(logging.INFO, logger="ebook_library.client"):
                assert client.fetch_list(QueryTag.BOOKS) == []
                assert client.fetch_one(QueryTag.BOOK, "intro") is None

    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 2
    assert all("no result member" in r.getMessage() for r in errors)
    assert not any("No book found" in r.getMessage() for r in caplog.records)


def test_null_result_is_logged_as_not_found(caplog):
    with make_client() as client:
        with patch.object(client.session, "get", return_value=response(payload={"result": None})):
            with caplog.at_level(logging.INFO, logger="ebook_library.client"):
                assert client.fetch_one(QueryTag.BOOK, "nonexistent") is None

    assert not any(r.levelno == logging.ERROR for r in caplog.records)
    assert any("No book found" in r.getMessage() for r in caplog.records)
