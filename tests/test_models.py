"""Tests for ebrain.models."""

import pytest

from ebrain.models import AgentReply, ConversationTurn, Issue, IssueUpdate, TableQuery, TableRecord


def test_issue_payload_skips_unset() -> None:
    issue = Issue(project_id=3, subject="Test")
    assert issue.to_payload() == {"project_id": 3, "subject": "Test"}


def test_issue_frozen() -> None:
    issue = Issue(project_id=3, subject="Test")
    with pytest.raises(Exception):  # ValidationError or TypeError depending on pydantic version
        issue.subject = "changed"  # type: ignore[misc]


def test_issue_update_only_supplied_fields() -> None:
    assert IssueUpdate(priority_id=4).to_payload() == {"priority_id": 4}
    assert IssueUpdate().to_payload() == {}


def test_issue_update_keeps_empty_string() -> None:
    assert IssueUpdate(description="").to_payload() == {"description": ""}


class TestTableRecord:
    def test_unknown_kwargs_folded_into_extension(self) -> None:
        record = TableRecord(short_description="x", category="network", u_custom=1)  # type: ignore[call-arg]
        assert record.extra_fields == {"category": "network", "u_custom": 1}
        assert record.to_payload() == {"short_description": "x", "category": "network", "u_custom": 1}

    def test_known_field_wins_over_extension(self) -> None:
        record = TableRecord(state="2", extra_fields={"state": "7", "category": "db"})
        assert record.to_payload() == {"state": "2", "category": "db"}

    def test_payload_drops_none(self) -> None:
        record = TableRecord(short_description="x", description=None, extra_fields={"impact": None})
        assert record.to_payload() == {"short_description": "x"}

    def test_numeric_enums_kept(self) -> None:
        assert TableRecord(priority=1).to_payload() == {"priority": 1}


class TestTableQuery:
    def test_all_params(self) -> None:
        query = TableQuery(query="active=true", limit=5, fields=["number", "state"], display_value=True)
        assert query.to_params() == {
            "sysparm_query": "active=true",
            "sysparm_limit": 5,
            "sysparm_fields": "number,state",
            "sysparm_display_value": "true",
        }

    def test_empty(self) -> None:
        assert TableQuery().to_params() == {}

    def test_display_value_false(self) -> None:
        assert TableQuery(display_value=False).to_params() == {"sysparm_display_value": "false"}


def test_conversation_turn_rejects_unknown_role() -> None:
    with pytest.raises(Exception):
        ConversationTurn(role="system", content="hi")  # type: ignore[arg-type]


def test_agent_reply_to_dict() -> None:
    assert AgentReply(text="hello").to_dict() == {"text": "hello"}
    assert AgentReply(error="boom").to_dict() == {"error": "boom"}
    assert AgentReply(text="hello").ok
    assert not AgentReply(error="boom").ok
