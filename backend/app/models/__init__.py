"""Modelos de domínio e DTOs."""
from app.models.devops_models import WorkItemResponse, PullRequestResponse, TITLE_FIELD, TAGS_FIELD
from app.models.tagging import TaggingConfig, TagOutcome, TagResult, TagRunSummary

__all__ = [
    "WorkItemResponse",
    "PullRequestResponse",
    "TITLE_FIELD",
    "TAGS_FIELD",
    "TaggingConfig",
    "TagOutcome",
    "TagResult",
    "TagRunSummary",
]
