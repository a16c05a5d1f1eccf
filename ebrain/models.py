"""Shared pydantic models — the contract between providers, tools and the agent boundary."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Issue(BaseModel):
    """A Redmine issue as sent on create."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None  # server-assigned
    project_id: int
    subject: str
    description: str | None = None
    status_id: int | None = None
    priority_id: int | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class IssueUpdate(BaseModel):
    """Partial Redmine issue. Only fields that were actually supplied are sent."""

    model_config = ConfigDict(frozen=True)

    project_id: int | None = None
    subject: str | None = None
    description: str | None = None
    status_id: int | None = None
    priority_id: int | None = None
    notes: str | None = None  # journal entry added alongside the update

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class TableRecord(BaseModel):
    """A ServiceNow table record: well-known fields plus an open extension map.

    Unknown keyword arguments are folded into ``extra_fields`` so nothing the
    caller supplies is lost. The two halves are merged only in ``to_payload``.
    """

    model_config = ConfigDict(frozen=True)

    sys_id: str | None = None
    short_description: str | None = None
    description: str | None = None
    state: str | int | None = None
    priority: str | int | None = None
    urgency: str | int | None = None
    impact: str | int | None = None
    caller_id: str | None = None
    assigned_to: str | None = None
    assignment_group: str | None = None
    work_notes: str | None = None
    comments: str | None = None
    close_code: str | None = None
    close_notes: str | None = None
    extra_fields: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _collect_extra(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        known = set(cls.model_fields)
        extra = dict(data.get("extra_fields") or {})
        extra.update({k: v for k, v in data.items() if k not in known})
        result = {k: v for k, v in data.items() if k in known}
        result["extra_fields"] = extra
        return result

    def to_payload(self) -> dict[str, Any]:
        payload = {k: v for k, v in self.extra_fields.items() if v is not None}
        payload.update(self.model_dump(exclude={"extra_fields"}, exclude_none=True))
        return payload


class TableQuery(BaseModel):
    """Query parameters for a Table API list call."""

    model_config = ConfigDict(frozen=True)

    query: str | None = None  # sysparm_query, forwarded verbatim
    limit: int | None = None
    fields: list[str] | None = None
    display_value: bool | None = None

    def to_params(self) -> dict[str, str | int]:
        params: dict[str, str | int] = {}
        if self.query:
            params["sysparm_query"] = self.query
        if self.limit is not None:
            params["sysparm_limit"] = self.limit
        if self.fields:
            params["sysparm_fields"] = ",".join(self.fields)
        if self.display_value is not None:
            params["sysparm_display_value"] = "true" if self.display_value else "false"
        return params


class ConversationTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant", "error"]
    content: str


class AgentReply(BaseModel):
    """Result of one agent call: exactly one of text or error is set."""

    model_config = ConfigDict(frozen=True)

    text: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, str]:
        if self.error is not None:
            return {"error": self.error}
        return {"text": self.text or ""}
