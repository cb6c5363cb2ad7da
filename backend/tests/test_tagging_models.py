"""Testes para os modelos de tagueamento."""
from app.models.tagging import TaggingConfig, TagOutcome, TagResult, TagRunSummary


def test_summary_counts_and_exit_code():
    summary = TagRunSummary(
        environment_tag="DeployedEnv:QA",
        results=[
            TagResult(1, TagOutcome.UPDATED),
            TagResult(2, TagOutcome.SKIPPED),
            TagResult(3, TagOutcome.FAILED, message="erro"),
            TagResult(4, TagOutcome.UPDATED),
        ],
    )
    assert (summary.total, summary.updated, summary.skipped, summary.failed) == (4, 2, 1, 1)
    assert summary.exit_code == 1
    assert [r.work_item_id for r in summary.failures] == [3]


def test_empty_summary_exit_zero():
    summary = TagRunSummary(environment_tag="DeployedEnv:QA")
    assert summary.total == 0
    assert summary.exit_code == 0


def test_has_credentials():
    base = dict(organization="o", project="p", environment_tag="DeployedEnv:QA")
    assert not TaggingConfig(**base).has_credentials
    assert TaggingConfig(**base, pat="x").has_credentials
    assert TaggingConfig(**base, access_token="y").has_credentials


def test_result_to_dict():
    d = TagResult(5, TagOutcome.SKIPPED, title="T", previous_tags="A").to_dict()
    assert d["outcome"] == "skipped"
    assert d["work_item_id"] == 5
    assert d["new_tags"] is None
