"""Configuração pytest e fixtures."""
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Garante que backend está no path
_backend = Path(__file__).resolve().parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: testes que exigem .env (Azure DevOps)")


def pytest_collection_modifyitems(config, items):
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(pytest.mark.integration)


# Variáveis lidas por Settings que a própria pipeline define (credenciais, PR, commit)
PIPELINE_ENV_VARS = (
    "AZURE_DEVOPS_ORG",
    "AZURE_DEVOPS_PROJECT",
    "AZURE_DEVOPS_PAT",
    "SYSTEM_ACCESSTOKEN",
    "SYSTEM_COLLECTIONURI",
    "SYSTEM_TEAMPROJECT",
    "DEPLOY_ENVIRONMENT",
    "GITHUB_TOKEN",
    "SYSTEM_PULLREQUEST_TITLE",
    "SYSTEM_PULLREQUEST_DESCRIPTION",
    "BUILD_REPOSITORY_NAME",
    "BUILD_REPOSITORY_URI",
    "COMMIT_MESSAGE",
    "GIT_REPO_PATH",
    "PIPELINE_HTML_LOG",
)


@pytest.fixture(autouse=True)
def clean_pipeline_env(request, monkeypatch):
    """Testes unitários não dependem das variáveis do agente da pipeline (integração usa o .env real)."""
    if request.node.get_closest_marker("integration"):
        return
    for name in PIPELINE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def tagging_config():
    """Configuração mínima válida (sem fontes de PR)."""
    from app.models.tagging import TaggingConfig
    return TaggingConfig(
        organization="qualiit",
        project="Projeto Teste",
        environment_tag="DeployedEnv:QA",
        pat="pat-teste",
    )


@pytest.fixture
def fake_devops():
    """
    Cliente Azure DevOps falso: work items em memória (id -> tags).
    Registra as atualizações em fake.updates.
    """
    from app.models.devops_models import WorkItemResponse

    store: dict[int, str] = {}
    client = MagicMock()
    client.store = store
    client.updates = []

    def get_work_item_by_id(work_item_id):
        if work_item_id not in store:
            return None
        fields = {"System.Title": f"Item {work_item_id}"}
        if store[work_item_id]:
            fields["System.Tags"] = store[work_item_id]
        return WorkItemResponse(id=work_item_id, rev=1, fields=fields)

    def update_work_item_tags(work_item_id, tags):
        client.updates.append((work_item_id, tags))
        store[work_item_id] = tags
        return WorkItemResponse(id=work_item_id, rev=2, fields={"System.Tags": tags})

    client.get_work_item_by_id.side_effect = get_work_item_by_id
    client.update_work_item_tags.side_effect = update_work_item_tags
    client.work_item_web_url.side_effect = lambda i: f"https://dev.azure.com/qualiit/P/_workitems/edit/{i}"
    return client
