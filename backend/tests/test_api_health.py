"""Testes dos endpoints da API FastAPI."""
from unittest.mock import patch

from fastapi.testclient import TestClient

import main
from app.config import Settings
from app.models.tagging import TagOutcome, TagResult

client = TestClient(main.app)


def _settings(**kwargs):
    base = dict(
        AZURE_DEVOPS_ORG="qualiit",
        AZURE_DEVOPS_PROJECT="Projeto",
        DEPLOY_ENVIRONMENT="qa",
        AZURE_DEVOPS_PAT="",
        SYSTEM_ACCESSTOKEN="",
    )
    base.update(kwargs)
    return Settings(_env_file=None, **base)


def test_health_returns_200():
    """GET /health retorna 200 e status ok."""
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json().get("status") == "ok"


def test_tag_work_item_manual(monkeypatch):
    """POST /tag/work-item/{id} aplica a tag com o ambiente informado."""
    monkeypatch.setattr(main, "settings", _settings(AZURE_DEVOPS_PAT="pat"))
    result = TagResult(10, TagOutcome.UPDATED, title="T", previous_tags="", new_tags="DeployedEnv:PROD")
    with patch("main.AzureDevOpsClient"), patch("main.WorkItemTagService") as svc_cls:
        svc_cls.return_value.tag_work_item.return_value = result
        r = client.post("/tag/work-item/10", params={"environment": "prod"})
    assert r.status_code == 200
    assert r.json()["result"]["outcome"] == "updated"
    assert svc_cls.call_args.args[1] == "DeployedEnv:PROD"


def test_tag_work_item_without_credentials(monkeypatch):
    monkeypatch.setattr(main, "settings", _settings())
    r = client.post("/tag/work-item/10")
    assert r.status_code == 401


def test_tag_work_item_without_environment(monkeypatch):
    monkeypatch.setattr(main, "settings", _settings(DEPLOY_ENVIRONMENT="", AZURE_DEVOPS_PAT="pat"))
    r = client.post("/tag/work-item/10")
    assert r.status_code == 400


def test_tag_work_item_failure_returns_502(monkeypatch):
    monkeypatch.setattr(main, "settings", _settings(AZURE_DEVOPS_PAT="pat"))
    result = TagResult(10, TagOutcome.FAILED, message="Work item não encontrado")
    with patch("main.AzureDevOpsClient"), patch("main.WorkItemTagService") as svc_cls:
        svc_cls.return_value.tag_work_item.return_value = result
        r = client.post("/tag/work-item/10")
    assert r.status_code == 502
