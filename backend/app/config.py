"""Configurações do sistema usando Pydantic Settings."""
import re
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.models.tagging import TaggingConfig
from app.utils.tag_utils import normalize_environment_tag

_BACKEND_DIR = Path(__file__).resolve().parent.parent
_ENV_FILE = _BACKEND_DIR / ".env"

# https://dev.azure.com/{org}/ ou https://{org}.visualstudio.com/
_COLLECTION_URI_ORG = re.compile(r"https?://(?:dev\.azure\.com/([^/]+)|([^./]+)\.visualstudio\.com)", re.IGNORECASE)


def _is_pipeline_placeholder(v: str) -> bool:
    """Variável não definida na pipeline chega como literal '$(Nome)'."""
    s = v.strip()
    return s.startswith("$(") and s.endswith(")")


def _parse_pipeline_bool(v: object, default: bool) -> bool:
    if v is None:
        return default
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        s = v.strip().lower()
        if not s or s.startswith("$("):
            return default
        return s in ("1", "true", "yes")
    return default


class Settings(BaseSettings):
    """Configurações da aplicação com validação automática."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Azure DevOps
    AZURE_DEVOPS_ORG: str = Field(
        default="",
        description="Organização do Azure DevOps (se vazio, usa SYSTEM_COLLECTIONURI)",
    )
    AZURE_DEVOPS_PROJECT: str = Field(
        default="",
        description="Nome do projeto no Azure DevOps (se vazio, usa SYSTEM_TEAMPROJECT)",
    )
    AZURE_DEVOPS_PAT: str = Field(
        default="",
        description="Personal Access Token do Azure DevOps (autenticação Basic)",
    )
    SYSTEM_ACCESSTOKEN: str = Field(
        default="",
        description="Token OAuth da pipeline ($(System.AccessToken)); tem prioridade sobre o PAT",
    )
    SYSTEM_COLLECTIONURI: str = Field(
        default="",
        description="URI da organização fornecida pela pipeline (ex.: https://dev.azure.com/qualiit/)",
    )
    SYSTEM_TEAMPROJECT: str = Field(
        default="",
        description="Projeto da pipeline em execução",
    )

    # Ambiente de deploy
    DEPLOY_ENVIRONMENT: str = Field(
        default="",
        description="Ambiente do deploy (ex.: dev, qa, prod). Vira a tag DeployedEnv:<AMBIENTE>",
    )

    # GitHub (opcional: busca título/descrição do PR em merge commits)
    GITHUB_TOKEN: str = Field(
        default="",
        description="Token do GitHub para ler o Pull Request (opcional)",
    )

    # Variáveis de PR / repositório fornecidas pela pipeline
    SYSTEM_PULLREQUEST_TITLE: str = Field(default="", description="Título do PR (apenas builds de PR)")
    SYSTEM_PULLREQUEST_DESCRIPTION: str = Field(default="", description="Descrição do PR (apenas builds de PR)")
    BUILD_REPOSITORY_NAME: str = Field(default="", description="Nome do repositório (ex.: owner/repo ou repo)")
    BUILD_REPOSITORY_URI: str = Field(default="", description="URL do repositório (ex.: https://github.com/owner/repo)")

    # Commit
    COMMIT_MESSAGE: str = Field(
        default="",
        description="Mensagem de commit já fornecida. Se vazio, lê 'git log -1' em GIT_REPO_PATH",
    )
    GIT_REPO_PATH: str = Field(default=".", description="Diretório do repositório git")

    @field_validator(
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
        mode="before",
    )
    @classmethod
    def parse_pipeline_str(cls, v: object) -> object:
        """Trata variáveis não definidas do Azure DevOps Pipeline."""
        if isinstance(v, str) and _is_pipeline_placeholder(v):
            return ""
        return v

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # Log HTML por execução (publicado como artefato da pipeline)
    PIPELINE_HTML_LOG: bool = Field(
        default=True,
        description="Se True, grava backend/logs/tag_pipeline_YYYYMMDD_HHMMSS.html",
    )

    @field_validator("PIPELINE_HTML_LOG", mode="before")
    @classmethod
    def parse_pipeline_html_log(cls, v: object) -> bool:
        """Quando a variável não está definida na pipeline, Azure DevOps envia literal '$(PIPELINE_HTML_LOG)'."""
        return _parse_pipeline_bool(v, default=True)

    @property
    def azure_devops_org(self) -> str:
        """Organização explícita ou extraída de SYSTEM_COLLECTIONURI."""
        org = self.AZURE_DEVOPS_ORG.strip()
        if org:
            return org
        m = _COLLECTION_URI_ORG.match(self.SYSTEM_COLLECTIONURI.strip())
        if not m:
            return ""
        return m.group(1) or m.group(2) or ""

    @property
    def azure_devops_project(self) -> str:
        return self.AZURE_DEVOPS_PROJECT.strip() or self.SYSTEM_TEAMPROJECT.strip()

    @property
    def azure_devops_base_url(self) -> str:
        """URL base do Azure DevOps."""
        return f"https://dev.azure.com/{self.azure_devops_org}"

    def tagging_config(self, environment: str | None = None) -> TaggingConfig:
        """
        Monta a configuração explícita da execução (uma vez, no ponto de entrada).
        Levanta ValueError se organização, projeto ou ambiente não estiverem definidos.
        Credenciais ausentes não levantam erro aqui: ver TaggingConfig.has_credentials.
        """
        org = self.azure_devops_org
        project = self.azure_devops_project
        env = (environment or self.DEPLOY_ENVIRONMENT or "").strip()
        missing = [
            name
            for name, value in (
                ("AZURE_DEVOPS_ORG", org),
                ("AZURE_DEVOPS_PROJECT", project),
                ("DEPLOY_ENVIRONMENT", env),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"Configuração obrigatória ausente: {', '.join(missing)}")
        return TaggingConfig(
            organization=org,
            project=project,
            environment_tag=normalize_environment_tag(env),
            pat=self.AZURE_DEVOPS_PAT.strip(),
            access_token=self.SYSTEM_ACCESSTOKEN.strip(),
            github_token=self.GITHUB_TOKEN.strip(),
            pr_title=self.SYSTEM_PULLREQUEST_TITLE,
            pr_description=self.SYSTEM_PULLREQUEST_DESCRIPTION,
            repository_name=self.BUILD_REPOSITORY_NAME.strip(),
            repository_uri=self.BUILD_REPOSITORY_URI.strip(),
            commit_message=self.COMMIT_MESSAGE,
            repo_path=self.GIT_REPO_PATH or ".",
        )


settings = Settings()
