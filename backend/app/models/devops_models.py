"""Modelos para integração Azure DevOps (work items, resposta da API)."""
from typing import Any, Optional

from pydantic import BaseModel


class WorkItemResponse(BaseModel):
    """Resposta de um Work Item do Azure DevOps."""

    id: int
    rev: int
    fields: dict[str, Any]
    relations: Optional[list[dict[str, Any]]] = None
    url: str = ""

    @property
    def title(self) -> str:
        return (self.fields.get(TITLE_FIELD) or "").strip()

    @property
    def tags(self) -> str:
        """Campo System.Tags; o Azure DevOps omite o campo quando não há tags."""
        return (self.fields.get(TAGS_FIELD) or "").strip()


class PullRequestResponse(BaseModel):
    """Título e descrição de um Pull Request do GitHub."""

    number: int
    title: str = ""
    body: Optional[str] = None
    html_url: str = ""


TITLE_FIELD = "System.Title"
TAGS_FIELD = "System.Tags"
