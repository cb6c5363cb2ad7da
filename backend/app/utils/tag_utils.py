"""Utilitários para referências AB#<id>, normalização da tag de ambiente e campo System.Tags."""
import re
from typing import Optional

# Referência de work item do Azure Boards em texto livre (commit, PR): AB#1234
WORK_ITEM_REFERENCE_PATTERN = re.compile(r"AB#(\d+)")

# Merge commit gerado pelo GitHub ao fechar um PR: "Merge pull request #42 from owner/branch"
MERGE_PULL_REQUEST_PATTERN = re.compile(r"Merge pull request #(\d+)")

ENVIRONMENT_TAG_PREFIX = "DeployedEnv:"

# Separador usado pelo Azure DevOps no campo System.Tags
TAG_SEPARATOR = ";"


def extract_work_item_ids(text: Optional[str]) -> set[int]:
    """
    Extrai os IDs de work item referenciados no texto no formato AB#<dígitos>.

    Args:
        text: Texto livre (mensagem de commit, título/descrição de PR). Pode ser None.

    Returns:
        Conjunto de IDs distintos (vazio se não houver referências).
    """
    if not text:
        return set()
    return {int(m) for m in WORK_ITEM_REFERENCE_PATTERN.findall(text)}


def extract_merged_pull_request_number(commit_message: Optional[str]) -> Optional[int]:
    """Número do PR se a mensagem for de merge commit do GitHub, senão None."""
    if not commit_message:
        return None
    match = MERGE_PULL_REQUEST_PATTERN.search(commit_message)
    return int(match.group(1)) if match else None


def normalize_environment_tag(environment: str) -> str:
    """
    Normaliza o nome do ambiente para a tag DeployedEnv:<AMBIENTE>.

    Regra: ambiente em maiúsculas; se já vier com o prefixo, ele é removido antes,
    então normalizar duas vezes dá o mesmo resultado.
    Ex.: "dev" -> "DeployedEnv:DEV"; "DeployedEnv:dev" -> "DeployedEnv:DEV".
    """
    env = (environment or "").strip()
    if env.lower().startswith(ENVIRONMENT_TAG_PREFIX.lower()):
        env = env[len(ENVIRONMENT_TAG_PREFIX):].strip()
    if not env:
        raise ValueError("Nome do ambiente não pode ser vazio")
    return f"{ENVIRONMENT_TAG_PREFIX}{env.upper()}"


def has_tag(tags: Optional[str], tag: str) -> bool:
    """
    Indica se o campo System.Tags já contém a tag.

    Verificação por substring, diferenciando maiúsculas: "Legacy-DeployedEnv:QA"
    conta como já tagueado para "DeployedEnv:QA".
    """
    return tag in (tags or "")


def append_tag(tags: Optional[str], tag: str) -> str:
    """
    Novo valor do campo System.Tags com a tag no final.

    Campo vazio -> apenas a tag. Caso contrário "<atual>; <tag>", preservando
    os tokens existentes e sua ordem. Separador sobrando no final é descartado
    ("Alpha;" -> "Alpha; <tag>").
    """
    current = (tags or "").strip().rstrip(TAG_SEPARATOR + " ")
    if not current:
        return tag
    return f"{current}{TAG_SEPARATOR} {tag}"
