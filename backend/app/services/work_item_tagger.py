"""Orquestração: por work item, aplicar a tag de ambiente em System.Tags (sem duplicar)."""
import logging
from typing import Iterable

from app.models.tagging import TagOutcome, TagResult, TagRunSummary
from app.services.devops_client import AzureDevOpsClient
from app.utils.pipeline_logger import log_tag_result
from app.utils.tag_utils import append_tag, has_tag

logger = logging.getLogger(__name__)


class WorkItemTagService:
    """Aplica a tag DeployedEnv:<AMBIENTE> nos work items, um por vez."""

    def __init__(self, devops_client: AzureDevOpsClient, environment_tag: str) -> None:
        self.devops = devops_client
        self.environment_tag = environment_tag

    def tag_work_item(self, work_item_id: int) -> TagResult:
        """
        Processa um work item: lê tags, pula se já tagueado, senão acrescenta a tag.
        Nunca levanta exceção: erro de leitura/atualização vira TagResult FAILED.
        """
        try:
            wi = self.devops.get_work_item_by_id(work_item_id)
        except Exception as e:
            return self._failed(work_item_id, f"Falha ao ler work item: {e}")
        if wi is None:
            return self._failed(work_item_id, "Work item não encontrado")

        current = wi.tags
        if has_tag(current, self.environment_tag):
            logger.info("Work item %s já possui %s", work_item_id, self.environment_tag)
            return TagResult(work_item_id, TagOutcome.SKIPPED, title=wi.title, previous_tags=current)

        new_tags = append_tag(current, self.environment_tag)
        try:
            self.devops.update_work_item_tags(work_item_id, new_tags)
        except Exception as e:
            return self._failed(work_item_id, f"Falha ao atualizar tags: {e}", title=wi.title, previous_tags=current)
        logger.info("Work item %s tagueado: %s", work_item_id, new_tags)
        return TagResult(work_item_id, TagOutcome.UPDATED, title=wi.title, previous_tags=current, new_tags=new_tags)

    def _failed(self, work_item_id: int, message: str, *, title: str = "", previous_tags: str = "") -> TagResult:
        logger.error("Work item %s: %s", work_item_id, message)
        return TagResult(
            work_item_id,
            TagOutcome.FAILED,
            title=title,
            previous_tags=previous_tags,
            message=message,
        )

    def tag_work_items(self, work_item_ids: Iterable[int]) -> TagRunSummary:
        """Processa todos os IDs em sequência; falha em um não interrompe os demais."""
        summary = TagRunSummary(environment_tag=self.environment_tag)
        for work_item_id in work_item_ids:
            result = self.tag_work_item(work_item_id)
            summary.results.append(result)
            log_tag_result(result, link_work_item=self.devops.work_item_web_url(work_item_id))
        return summary
