"""Cliente Azure DevOps REST API: leitura de work items e atualização de System.Tags."""
import base64
import logging
from urllib.parse import quote, unquote

import requests
from requests.adapters import HTTPAdapter

from app.models.devops_models import WorkItemResponse, TAGS_FIELD, TITLE_FIELD

logger = logging.getLogger(__name__)


class AzureDevOpsClient:
    """Cliente para Azure DevOps: obter work item e atualizar System.Tags."""

    def __init__(
        self,
        organization: str,
        project: str,
        *,
        pat: str | None = None,
        access_token: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.org = (organization or "").strip()
        self.project = (project or "").strip()
        self.pat = (pat or "").strip()
        self.access_token = (access_token or "").strip()
        self.api_version = "7.1"
        if not self.org or not self.project:
            raise ValueError("Organização e projeto do Azure DevOps são obrigatórios")
        if not self.access_token and not self.pat:
            raise ValueError("SYSTEM_ACCESSTOKEN ou AZURE_DEVOPS_PAT não está configurado")
        self.base_url = f"https://dev.azure.com/{self.org}"
        self.session = session or requests.Session()
        # Sem retry: uma requisição por chamada
        adapter = HTTPAdapter(pool_connections=10, pool_maxsize=20, max_retries=0)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        self.session.headers.update({
            "Authorization": self._authorization_header(),
            "Content-Type": "application/json",
        })

    def _encode_pat(self) -> str:
        return base64.b64encode(f":{self.pat}".encode("utf-8")).decode("utf-8")

    def _authorization_header(self) -> str:
        """Bearer com o token OAuth da pipeline; senão Basic com o PAT."""
        if self.access_token:
            return f"Bearer {self.access_token}"
        return f"Basic {self._encode_pat()}"

    def _work_item_url(self, work_item_id: int) -> str:
        proj = unquote(self.project) if "%" in self.project else self.project
        proj_enc = quote(proj, safe="", encoding="utf-8")
        return f"{self.base_url}/{proj_enc}/_apis/wit/workitems/{work_item_id}"

    def _check_response(self, r: requests.Response) -> None:
        if r.status_code in (401, 403) or "/_signin" in (r.url or ""):
            raise ValueError("Erro de autenticação. Verifique SYSTEM_ACCESSTOKEN/AZURE_DEVOPS_PAT.")
        if "text/html" in (r.headers.get("Content-Type") or "") and r.status_code != 200:
            raise ValueError(f"Resposta inesperada (HTML). Status: {r.status_code}")
        r.raise_for_status()

    @staticmethod
    def _to_work_item(item: dict) -> WorkItemResponse:
        return WorkItemResponse(
            id=item["id"],
            rev=item.get("rev", 0),
            fields=item.get("fields", {}),
            relations=item.get("relations"),
            url=item.get("url", ""),
        )

    def get_work_item_by_id(self, work_item_id: int) -> WorkItemResponse | None:
        """Obtém um Work Item por ID (apenas título e tags). None se não existir."""
        try:
            r = self.session.get(
                self._work_item_url(work_item_id),
                params={"fields": f"{TITLE_FIELD},{TAGS_FIELD}", "api-version": self.api_version},
                timeout=30,
            )
            self._check_response(r)
            return self._to_work_item(r.json())
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                return None
            raise

    def update_work_item_tags(self, work_item_id: int, tags: str) -> WorkItemResponse:
        """Substitui o campo System.Tags do work item (JSON Patch)."""
        body = [{"op": "replace", "path": f"/fields/{TAGS_FIELD}", "value": tags}]
        r = self.session.patch(
            self._work_item_url(work_item_id),
            params={"api-version": self.api_version},
            json=body,
            headers={"Content-Type": "application/json-patch+json"},
            timeout=30,
        )
        self._check_response(r)
        return self._to_work_item(r.json())

    def work_item_web_url(self, work_item_id: int) -> str:
        """URL do work item no Azure DevOps (para logs)."""
        proj = unquote(self.project) if "%" in self.project else self.project
        proj_enc = quote(proj, safe="", encoding="utf-8")
        return f"{self.base_url}/{proj_enc}/_workitems/edit/{work_item_id}"

    def close(self) -> None:
        self.session.close()
