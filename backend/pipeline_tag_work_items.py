"""
Script da pipeline: aplica a tag DeployedEnv:<AMBIENTE> nos work items referenciados (AB#<id>).

Fontes das referências (nesta ordem, falha em uma não afeta as outras):
- Mensagem do último commit (COMMIT_MESSAGE ou git log -1).
- Título/descrição do PR (SYSTEM_PULLREQUEST_TITLE / SYSTEM_PULLREQUEST_DESCRIPTION).
- PR do GitHub quando o último commit é "Merge pull request #N" (requer GITHUB_TOKEN).

Modo de atualização (não duplica):
- Work item que já tem a tag é ignorado (contado como "já tagueado").
- Senão a tag é acrescentada ao final de System.Tags, preservando as existentes.

Exit code: 0 sem erros (inclusive quando não há work items); 1 se algum work item falhou
ou se não há credencial do Azure DevOps.
Log em HTML: backend/logs/tag_pipeline_YYYYMMDD_HHMMSS.html (publicado como artefato).
"""
import logging
import sys
from pathlib import Path

# Garante que o backend/app está no path quando rodado como script
_backend = Path(__file__).resolve().parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

from app.config import settings
from app.models.tagging import TaggingConfig, TagRunSummary
from app.services.devops_client import AzureDevOpsClient
from app.services.reference_collector import WorkItemReferenceCollector
from app.services.work_item_tagger import WorkItemTagService
from app.utils.pipeline_logger import end_html_log, log_run_summary, start_html_log, vso_log_issue

logger = logging.getLogger(__name__)


def run(
    config: TaggingConfig,
    *,
    collector: WorkItemReferenceCollector | None = None,
    devops_client: AzureDevOpsClient | None = None,
    html_log: bool = False,
) -> TagRunSummary:
    """Descobre os work items e aplica a tag. Sem work items, não acessa o Azure DevOps."""
    collector = collector or WorkItemReferenceCollector(config)
    try:
        work_item_ids = collector.collect_all()
    finally:
        collector.close()

    summary = TagRunSummary(environment_tag=config.environment_tag)
    if not work_item_ids:
        logger.info("Nenhum work item referenciado (AB#<id>); nada a fazer")
        return summary

    devops = devops_client or AzureDevOpsClient(
        config.organization,
        config.project,
        pat=config.pat,
        access_token=config.access_token,
    )
    if html_log:
        start_html_log(config.environment_tag)
    try:
        summary = WorkItemTagService(devops, config.environment_tag).tag_work_items(work_item_ids)
    finally:
        if html_log:
            end_html_log(summary)
        devops.close()
    return summary


def main() -> int:
    logging.basicConfig(
        level=getattr(logging, (settings.LOG_LEVEL or "INFO").upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    config = settings.tagging_config()
    if not config.has_credentials:
        logger.error("SYSTEM_ACCESSTOKEN ou AZURE_DEVOPS_PAT deve ser configurado via variável de ambiente")
        vso_log_issue("Credencial do Azure DevOps ausente (SYSTEM_ACCESSTOKEN ou AZURE_DEVOPS_PAT)", "error")
        return 1
    logger.info("Organização: %s | Projeto: %s | Tag: %s", config.organization, config.project, config.environment_tag)
    summary = run(config, html_log=settings.PIPELINE_HTML_LOG)
    return log_run_summary(summary)


if __name__ == "__main__":
    sys.exit(main())
