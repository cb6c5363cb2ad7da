"""
Log estruturado da pipeline de tag de ambiente.
Registra por work item: ID, título, tags anteriores, tags novas, resultado.
Saída: console (logger), comandos ##vso para o Azure Pipelines e
HTML em backend/logs/tag_pipeline_YYYYMMDD_HHMMSS.html (um arquivo por execução).
"""
import html
import logging
from datetime import datetime
from pathlib import Path

from app.models.tagging import TagOutcome, TagResult, TagRunSummary

_BACKEND_DIR = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = _BACKEND_DIR / "logs"
LOG_PREFIX = "tag_pipeline"

logger = logging.getLogger(__name__)

# Arquivo HTML da execução atual (preenchido por start_html_log, fechado por end_html_log)
_html_log_path: Path | None = None

_OUTCOME_LABELS = {
    TagOutcome.UPDATED: "Tagueado",
    TagOutcome.SKIPPED: "Já tagueado",
    TagOutcome.FAILED: "Erro",
}


def vso_log_issue(message: str, issue_type: str = "warning") -> None:
    """Emite ##vso[task.logissue] (aparece como aviso/erro no resumo da pipeline)."""
    text = " ".join((message or "").split())
    print(f"##vso[task.logissue type={issue_type}]{text}", flush=True)


def _html_log_file_path() -> Path:
    """Arquivo de log HTML desta execução."""
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
    return LOGS_DIR / f"{LOG_PREFIX}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.html"


def _html_header(title: str, environment_tag: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="pt-BR">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{html.escape(title)}</title>
  <style>
    body {{ font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; margin: 24px; background: #f5f5f5; }}
    h1 {{ color: #0078d4; margin-bottom: 8px; }}
    .meta {{ color: #666; margin-bottom: 20px; font-size: 14px; }}
    table {{ border-collapse: collapse; width: 100%; max-width: 1200px; background: #fff; box-shadow: 0 2px 8px rgba(0,0,0,.08); border-radius: 8px; overflow: hidden; }}
    th {{ background: #0078d4; color: #fff; text-align: left; padding: 12px 14px; font-size: 13px; }}
    td {{ padding: 12px 14px; border-bottom: 1px solid #eee; font-size: 13px; vertical-align: top; }}
    tr:hover {{ background: #f9f9f9; }}
    tr.erro {{ background: #fdecea; }}
    tr.erro:hover {{ background: #fad4cf; }}
    tr.skip {{ color: #666; }}
    a {{ color: #0078d4; text-decoration: none; }}
    a:hover {{ text-decoration: underline; }}
    .tags {{ max-width: 320px; word-break: break-word; }}
    .erro-cell {{ color: #a4262c; font-weight: 500; }}
  </style>
</head>
<body>
  <h1>{html.escape(title)}</h1>
  <p class="meta">Execução: {html.escape(datetime.now().strftime("%d/%m/%Y %H:%M:%S"))} | Tag: {html.escape(environment_tag)}</p>
  <table>
    <thead>
      <tr>
        <th>Work Item</th>
        <th>Título</th>
        <th>Tags anteriores</th>
        <th>Tags atuais</th>
        <th>Status</th>
      </tr>
    </thead>
    <tbody>
"""


def start_html_log(environment_tag: str) -> Path | None:
    """
    Inicia o log HTML desta execução (cria arquivo com cabeçalho e tabela).
    Retorna o path do arquivo ou None em caso de erro.
    """
    global _html_log_path
    try:
        path = _html_log_file_path()
        with open(path, "w", encoding="utf-8") as f:
            f.write(_html_header("Log da Pipeline – Tag de Ambiente", environment_tag))
        _html_log_path = path
        logger.info("Log HTML iniciado: %s", path.name)
        return path
    except OSError as e:
        logger.warning("Não foi possível criar log HTML: %s", e)
        return None


def end_html_log(summary: TagRunSummary | None = None) -> None:
    """Fecha o log HTML (totais no rodapé). Deve ser chamado ao final da pipeline."""
    global _html_log_path
    if not _html_log_path:
        return
    try:
        footer = ""
        if summary is not None:
            footer = (
                f'  <p class="meta">Total: {summary.total} | Tagueados: {summary.updated} | '
                f"Já tagueados: {summary.skipped} | Erros: {summary.failed}</p>\n"
            )
        with open(_html_log_path, "a", encoding="utf-8") as f:
            f.write(f"    </tbody>\n  </table>\n{footer}</body>\n</html>\n")
        logger.info("Log HTML fechado: %s", _html_log_path.name)
    except OSError as e:
        logger.warning("Não foi possível fechar log HTML: %s", e)
    _html_log_path = None


def log_tag_result(result: TagResult, link_work_item: str | None = None) -> None:
    """
    Escreve o resultado de um work item.
    Saída: console (logger) e, se start_html_log foi chamado, uma linha no log HTML.
    """
    label = _OUTCOME_LABELS[result.outcome]
    logger.info(
        "Work item %s | Título: %s | Tags anteriores: %s | Tags atuais: %s | %s",
        result.work_item_id,
        result.title or "—",
        result.previous_tags or "—",
        result.new_tags or result.previous_tags or "—",
        label,
    )
    if result.outcome == TagOutcome.FAILED:
        vso_log_issue(f"Work item {result.work_item_id}: {result.message}")

    if _html_log_path:
        try:
            row_class = {TagOutcome.FAILED: "erro", TagOutcome.SKIPPED: "skip"}.get(result.outcome, "")
            status = (
                f'<span class="erro-cell">{html.escape(result.message or label)}</span>'
                if result.outcome == TagOutcome.FAILED
                else label
            )
            if link_work_item:
                link_wi = f'<a href="{html.escape(str(link_work_item))}" target="_blank" rel="noopener">#{result.work_item_id}</a>'
            else:
                link_wi = f"#{result.work_item_id}"
            with open(_html_log_path, "a", encoding="utf-8") as f:
                f.write(
                    f'    <tr class="{row_class}">\n'
                    f"      <td>{link_wi}</td>\n"
                    f"      <td>{html.escape(result.title or '—')}</td>\n"
                    f'      <td class="tags">{html.escape(result.previous_tags or "—")}</td>\n'
                    f'      <td class="tags">{html.escape(result.new_tags or result.previous_tags or "—")}</td>\n'
                    f"      <td>{status}</td>\n"
                    f"    </tr>\n"
                )
        except OSError as e:
            logger.warning("Não foi possível escrever linha no log HTML: %s", e)


def log_run_summary(summary: TagRunSummary) -> int:
    """
    Escreve os totais da execução e retorna o exit code (1 se houve falha).
    O resumo vai direto para stdout: aparece no log da pipeline qualquer que seja o LOG_LEVEL.
    """
    print(
        f"Tag {summary.environment_tag} concluída: {summary.total} work item(s), "
        f"{summary.updated} tagueado(s), {summary.skipped} já tagueado(s), {summary.failed} erro(s)",
        flush=True,
    )
    if summary.failed:
        failed_ids = ", ".join(str(r.work_item_id) for r in summary.failures)
        vso_log_issue(f"{summary.failed} work item(s) não foram tagueados com {summary.environment_tag}: {failed_ids}")
    return summary.exit_code
