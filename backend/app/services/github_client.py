"""Cliente GitHub REST API: leitura de Pull Request (título e descrição)."""
import logging

import requests

from app.models.devops_models import PullRequestResponse

logger = logging.getLogger(__name__)


class GitHubClient:
    """Cliente mínimo para a API REST do GitHub (somente leitura de PR)."""

    def __init__(
        self,
        token: str,
        *,
        base_url: str = "https://api.github.com",
        session: requests.Session | None = None,
    ) -> None:
        self.token = (token or "").strip()
        if not self.token:
            raise ValueError("GITHUB_TOKEN não está configurado")
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        })

    def get_pull_request(self, repo_full_name: str, pr_number: int) -> PullRequestResponse:
        """GET /repos/{owner}/{repo}/pulls/{number}."""
        r = self.session.get(f"{self.base_url}/repos/{repo_full_name}/pulls/{pr_number}", timeout=30)
        r.raise_for_status()
        data = r.json()
        return PullRequestResponse(
            number=data.get("number", pr_number),
            title=data.get("title") or "",
            body=data.get("body"),
            html_url=data.get("html_url") or "",
        )

    def close(self) -> None:
        self.session.close()
