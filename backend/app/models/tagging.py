"""Modelos da execução de tagueamento: configuração, resultado por work item e resumo."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class TaggingConfig:
    """Configuração explícita de uma execução, montada uma vez no ponto de entrada."""

    organization: str
    project: str
    environment_tag: str  # ex.: "DeployedEnv:QA"
    pat: str = ""
    access_token: str = ""  # System.AccessToken (Bearer)
    github_token: str = ""
    pr_title: str = ""
    pr_description: str = ""
    repository_name: str = ""
    repository_uri: str = ""
    commit_message: str = ""  # se vazio, lê do git
    repo_path: str = "."

    @property
    def has_credentials(self) -> bool:
        """Há token OAuth ou PAT para o Azure DevOps."""
        return bool(self.access_token or self.pat)


class TagOutcome(str, Enum):
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class TagResult:
    """Resultado do processamento de um work item."""

    work_item_id: int
    outcome: TagOutcome
    title: str = ""
    previous_tags: str = ""
    new_tags: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "work_item_id": self.work_item_id,
            "outcome": self.outcome.value,
            "title": self.title,
            "previous_tags": self.previous_tags,
            "new_tags": self.new_tags,
            "message": self.message,
        }


@dataclass
class TagRunSummary:
    """Totais da execução (redução da lista de TagResult)."""

    environment_tag: str
    results: list[TagResult] = field(default_factory=list)

    def _count(self, outcome: TagOutcome) -> int:
        return sum(1 for r in self.results if r.outcome == outcome)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def updated(self) -> int:
        return self._count(TagOutcome.UPDATED)

    @property
    def skipped(self) -> int:
        return self._count(TagOutcome.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(TagOutcome.FAILED)

    @property
    def failures(self) -> list[TagResult]:
        return [r for r in self.results if r.outcome == TagOutcome.FAILED]

    @property
    def exit_code(self) -> int:
        """1 se algum work item falhou, 0 caso contrário (inclusive sem work items)."""
        return 1 if self.failed else 0
