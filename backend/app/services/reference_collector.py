"""
Descoberta de work items referenciados (AB#<id>) na execução da pipeline.

Três fontes, sempre nesta ordem:
1. Mensagem do último commit (informada via COMMIT_MESSAGE ou lida com git log).
2. Título/descrição do PR fornecidos pela pipeline (builds de PR).
3. PR do GitHub, quando o último commit é um merge commit ("Merge pull request #N").

Falha em uma fonte nunca impede as outras: a fonte com erro contribui com conjunto vazio.
"""
import logging
import re
import subprocess
from typing import Callable, Optional

import requests

from app.models.tagging import TaggingConfig
from app.services.github_client import GitHubClient
from app.utils.tag_utils import extract_merged_pull_request_number, extract_work_item_ids

logger = logging.getLogger(__name__)

# https://github.com/owner/repo(.git) ou git@github.com:owner/repo(.git)
GITHUB_REPOSITORY_URI_PATTERN = re.compile(r"github\.com[/:]([^/\s]+)(?:/([^/?#\s]+))?", re.IGNORECASE)


def read_latest_commit_message(repo_path: str = ".") -> Optional[str]:
    """Mensagem completa do último commit (git log -1). None se não for possível ler o histórico."""
    try:
        result = subprocess.run(
            ["git", "log", "-1", "--pretty=format:%B"],
            cwd=repo_path,
            capture_output=True,
            text=True,
            timeout=30,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning("Não foi possível executar git log: %s", e)
        return None
    if result.returncode != 0:
        logger.warning("git log falhou (exit %s): %s", result.returncode, result.stderr.strip())
        return None
    return result.stdout


def resolve_github_repository(repository_name: str, repository_uri: str) -> Optional[str]:
    """
    Resolve "<owner>/<repo>" a partir das variáveis da pipeline.

    Nome já no formato owner/repo tem prioridade; senão o owner vem da URL do
    repositório e é combinado com o nome (ou com o repo da própria URL).
    """
    name = (repository_name or "").strip().strip("/")
    if "/" in name:
        return name
    match = GITHUB_REPOSITORY_URI_PATTERN.search((repository_uri or "").strip())
    if not match:
        return None
    owner = match.group(1)
    repo = name or (match.group(2) or "")
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not owner or not repo:
        return None
    return f"{owner}/{repo}"


class WorkItemReferenceCollector:
    """Coleta e agrega os IDs de work item das três fontes."""

    def __init__(
        self,
        config: TaggingConfig,
        *,
        github_client: GitHubClient | None = None,
        commit_reader: Callable[[str], Optional[str]] = read_latest_commit_message,
    ) -> None:
        self.config = config
        self._github_client = github_client
        self._commit_reader = commit_reader
        self._commit_message: Optional[str] = None
        self._commit_message_loaded = False

    def latest_commit_message(self) -> str:
        """Mensagem do último commit, lida uma única vez por execução."""
        if not self._commit_message_loaded:
            self._commit_message_loaded = True
            if (self.config.commit_message or "").strip():
                self._commit_message = self.config.commit_message
            else:
                self._commit_message = self._commit_reader(self.config.repo_path)
        return self._commit_message or ""

    def from_commit(self) -> set[int]:
        ids = extract_work_item_ids(self.latest_commit_message())
        logger.info("Commit: %s work item(s) referenciado(s)", len(ids))
        return ids

    def from_pull_request_metadata(self) -> set[int]:
        title = (self.config.pr_title or "").strip()
        description = (self.config.pr_description or "").strip()
        if not title and not description:
            logger.debug("Variáveis de PR ausentes (build não é de PR)")
            return set()
        ids = extract_work_item_ids(f"{title}\n{description}")
        logger.info("PR (pipeline): %s work item(s) referenciado(s)", len(ids))
        return ids

    def from_remote_pull_request(self) -> set[int]:
        """Busca o PR no GitHub quando o último commit é merge de PR."""
        pr_number = extract_merged_pull_request_number(self.latest_commit_message())
        if pr_number is None:
            return set()
        repo = resolve_github_repository(self.config.repository_name, self.config.repository_uri)
        if not repo:
            logger.info("Merge do PR #%s, mas não foi possível identificar owner/repo; PR do GitHub ignorado", pr_number)
            return set()
        client = self._github_client
        if client is None:
            if not self.config.github_token:
                logger.info("GITHUB_TOKEN não configurado; PR #%s de %s não será consultado", pr_number, repo)
                return set()
            client = self._github_client = GitHubClient(self.config.github_token)
        try:
            pr = client.get_pull_request(repo, pr_number)
        except (requests.RequestException, ValueError) as e:
            logger.warning("Falha ao consultar PR #%s de %s no GitHub: %s", pr_number, repo, e)
            return set()
        ids = extract_work_item_ids(f"{pr.title}\n{pr.body or ''}")
        logger.info("PR #%s (GitHub %s): %s work item(s) referenciado(s)", pr_number, repo, len(ids))
        return ids

    def collect_all(self) -> list[int]:
        """
        Executa as três fontes (ordem fixa), une e remove duplicados.
        Retorna IDs em ordem crescente.
        """
        found: set[int] = set()
        sources: list[tuple[str, Callable[[], set[int]]]] = [
            ("commit", self.from_commit),
            ("PR (pipeline)", self.from_pull_request_metadata),
            ("PR (GitHub)", self.from_remote_pull_request),
        ]
        for name, collect in sources:
            try:
                found |= collect()
            except Exception as e:
                logger.warning("Fonte %s ignorada por erro: %s", name, e)
        ids = sorted(found)
        logger.info("Work items encontrados: %s", ", ".join(f"AB#{i}" for i in ids) or "nenhum")
        return ids

    def close(self) -> None:
        if self._github_client is not None:
            self._github_client.close()
