"""Testes unitários do AzureDevOpsClient e GitHubClient com sessão requests falsa."""
import base64
from unittest.mock import MagicMock

import pytest
import requests

from app.services.devops_client import AzureDevOpsClient
from app.services.github_client import GitHubClient


def _response(json_data=None, status_code=200):
    r = MagicMock()
    r.status_code = status_code
    r.url = "https://dev.azure.com/qualiit/_apis/wit/workitems/1"
    r.headers = {"Content-Type": "application/json"}
    r.json.return_value = json_data or {}
    if status_code >= 400:
        r.raise_for_status.side_effect = requests.HTTPError(f"{status_code}", response=r)
    return r


def _session():
    session = MagicMock()
    session.headers = {}
    return session


def test_requires_credentials():
    with pytest.raises(ValueError):
        AzureDevOpsClient("qualiit", "Projeto", session=_session())


def test_pat_uses_basic_auth():
    session = _session()
    AzureDevOpsClient("qualiit", "Projeto", pat="abc", session=session)
    expected = base64.b64encode(b":abc").decode("utf-8")
    assert session.headers["Authorization"] == f"Basic {expected}"


def test_access_token_uses_bearer():
    session = _session()
    AzureDevOpsClient("qualiit", "Projeto", pat="abc", access_token="oauth", session=session)
    assert session.headers["Authorization"] == "Bearer oauth"


def test_get_work_item_reads_tags():
    session = _session()
    session.get.return_value = _response({"id": 7, "rev": 3, "fields": {"System.Title": "T", "System.Tags": "A; B"}})
    client = AzureDevOpsClient("qualiit", "Projeto X", pat="abc", session=session)
    wi = client.get_work_item_by_id(7)
    assert wi.tags == "A; B"
    assert wi.title == "T"
    url = session.get.call_args.args[0]
    assert url == "https://dev.azure.com/qualiit/Projeto%20X/_apis/wit/workitems/7"


def test_get_work_item_without_tags_field():
    session = _session()
    session.get.return_value = _response({"id": 7, "rev": 1, "fields": {"System.Title": "T"}})
    client = AzureDevOpsClient("qualiit", "Projeto", pat="abc", session=session)
    assert client.get_work_item_by_id(7).tags == ""


def test_get_work_item_not_found_returns_none():
    session = _session()
    session.get.return_value = _response(status_code=404)
    client = AzureDevOpsClient("qualiit", "Projeto", pat="abc", session=session)
    assert client.get_work_item_by_id(7) is None


def test_get_work_item_auth_error():
    session = _session()
    session.get.return_value = _response(status_code=401)
    client = AzureDevOpsClient("qualiit", "Projeto", pat="abc", session=session)
    with pytest.raises(ValueError):
        client.get_work_item_by_id(7)


def test_update_sends_json_patch():
    session = _session()
    session.patch.return_value = _response({"id": 7, "rev": 4, "fields": {"System.Tags": "A; DeployedEnv:QA"}})
    client = AzureDevOpsClient("qualiit", "Projeto", pat="abc", session=session)
    client.update_work_item_tags(7, "A; DeployedEnv:QA")
    kwargs = session.patch.call_args.kwargs
    assert kwargs["json"] == [{"op": "replace", "path": "/fields/System.Tags", "value": "A; DeployedEnv:QA"}]
    assert kwargs["headers"]["Content-Type"] == "application/json-patch+json"
    assert kwargs["params"]["api-version"] == "7.1"


def test_github_get_pull_request():
    session = _session()
    r = MagicMock()
    r.json.return_value = {"number": 42, "title": "AB#1", "body": None, "html_url": "https://github.com/o/r/pull/42"}
    session.get.return_value = r
    gh = GitHubClient("tok", session=session)
    pr = gh.get_pull_request("o/r", 42)
    assert pr.title == "AB#1"
    assert pr.body is None
    assert session.get.call_args.args[0] == "https://api.github.com/repos/o/r/pulls/42"
    assert session.headers["Authorization"] == "Bearer tok"


def test_github_requires_token():
    with pytest.raises(ValueError):
        GitHubClient("", session=_session())
