"""Tool registry — the Redmine and ServiceNow operations, defined once as data.

Each ToolSpec carries a snake_case name (MCP host), a camelCase name (agent
host), a description, a pydantic input model and a handler. ``ebrain.agent``
and ``ebrain.server`` register the same table into their own host format.
"""

import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ebrain.errors import InvalidInput, UnknownTool
from ebrain.fields import describe_all, fields_for
from ebrain.models import Issue, IssueUpdate, TableQuery, TableRecord
from ebrain.providers.redmine import RedmineProvider
from ebrain.providers.servicenow import ServiceNowProvider
from ebrain.settings import BrainSettings

logger = logging.getLogger(__name__)

QUERY_SYNTAX_HELP = """\
Query syntax (sysparm_query format):
- Simple: "state=1"
- AND: "state=1^priority=2"
- Dot-walk (reference field): "problem_id.number=PRB0040002"
- Name search: "caller_id.name=John Doe"
- Contains: "short_descriptionLIKEnetwork"
incident.problem_id references a sys_id, so search by problem number with "problem_id.number=PRB...".\
"""


@dataclass(frozen=True)
class Clients:
    """The configured provider for each remote system."""

    redmine: RedmineProvider
    servicenow: ServiceNowProvider

    @classmethod
    def from_settings(cls, settings: BrainSettings) -> "Clients":
        return cls(
            redmine=RedmineProvider.from_settings(settings),
            servicenow=ServiceNowProvider.from_settings(settings),
        )

    def close(self) -> None:
        self.redmine.close()
        self.servicenow.close()


@dataclass(frozen=True)
class ToolSpec:
    name: str
    agent_name: str
    description: str
    params: type[BaseModel]
    handler: Callable[[Clients, Any], Any]

    def input_schema(self) -> dict[str, Any]:
        return self.params.model_json_schema()


# ---------------------------------------------------------------------------
# Input models
# ---------------------------------------------------------------------------


class _Input(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class GetRedmineIssuesInput(_Input):
    project_id: int | None = Field(default=None, description="Only issues of this project")
    status_id: str | int | None = Field(default=None, description='"open", "closed", "*" or a status id')


class GetRedmineIssueInput(_Input):
    issue_id: int


class CreateRedmineIssueInput(_Input):
    project_id: int
    subject: str
    description: str | None = None
    priority_id: int | None = None
    status_id: int | None = None


class UpdateRedmineIssueInput(_Input):
    issue_id: int
    subject: str | None = None
    description: str | None = None
    status_id: int | None = None
    priority_id: int | None = None
    project_id: int | None = None
    notes: str | None = Field(default=None, description="Journal note added with the update")


class GetIncidentsInput(_Input):
    limit: int = Field(default=10, ge=1)


class CreateIncidentInput(_Input):
    short_description: str
    description: str | None = None
    urgency: str | int | None = None
    impact: str | int | None = None


class GetRecordsInput(_Input):
    table: str = Field(min_length=1, description="Table name, e.g. incident, problem, change_request, sc_request")
    query: str | None = Field(default=None, description="sysparm_query filter")
    limit: int = Field(default=10, ge=1)
    fields: list[str] | None = Field(default=None, description="Fields to return; defaults to the catalog fields")
    display_value: bool = Field(default=True, description="Resolve reference fields to display values")


class GetRecordInput(_Input):
    table: str = Field(min_length=1)
    sys_id: str = Field(min_length=1)
    display_value: bool = True


class CreateRecordInput(_Input):
    model_config = ConfigDict(extra="allow", frozen=True)

    table: str = Field(min_length=1)
    short_description: str
    description: str | None = None
    fields: dict[str, Any] | None = Field(default=None, description="Any other field values for the new record")


class UpdateRecordInput(_Input):
    model_config = ConfigDict(extra="allow", frozen=True)

    table: str = Field(min_length=1)
    sys_id: str = Field(min_length=1)
    short_description: str | None = None
    description: str | None = None
    state: str | int | None = None
    priority: str | int | None = None
    urgency: str | int | None = None
    impact: str | int | None = None
    assigned_to: str | None = None
    assignment_group: str | None = None
    work_notes: str | None = None
    comments: str | None = None
    close_code: str | None = None
    close_notes: str | None = None
    fields: dict[str, Any] | None = Field(default=None, description="Any other field values to change")


class DeleteRecordInput(_Input):
    table: str = Field(min_length=1)
    sys_id: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _extension(args: BaseModel, explicit: dict[str, Any] | None) -> dict[str, Any]:
    """Merge the explicit extension map with any undeclared keyword fields, dropping None."""
    merged = {**(explicit or {}), **(args.model_extra or {})}
    return {k: v for k, v in merged.items() if v is not None}


def get_redmine_issues(clients: Clients, args: GetRedmineIssuesInput) -> Any:
    return clients.redmine.list_issues(args.model_dump(exclude_none=True))


def get_redmine_issue(clients: Clients, args: GetRedmineIssueInput) -> Any:
    return clients.redmine.get_issue(args.issue_id)


def create_redmine_issue(clients: Clients, args: CreateRedmineIssueInput) -> Any:
    return clients.redmine.create_issue(Issue(**args.model_dump()))


def update_redmine_issue(clients: Clients, args: UpdateRedmineIssueInput) -> Any:
    changes = IssueUpdate(**args.model_dump(exclude={"issue_id"}, exclude_none=True))
    return clients.redmine.update_issue(args.issue_id, changes)


def get_servicenow_incidents(clients: Clients, args: GetIncidentsInput) -> Any:
    return clients.servicenow.get_records("incident", TableQuery(limit=args.limit))


def create_servicenow_incident(clients: Clients, args: CreateIncidentInput) -> Any:
    return clients.servicenow.create_record("incident", TableRecord(**args.model_dump(exclude_none=True)))


def get_servicenow_records(clients: Clients, args: GetRecordsInput) -> Any:
    query = TableQuery(
        query=args.query,
        limit=args.limit,
        fields=args.fields or fields_for(args.table) or None,
        display_value=args.display_value,
    )
    return clients.servicenow.get_records(args.table, query)


def get_servicenow_record(clients: Clients, args: GetRecordInput) -> Any:
    return clients.servicenow.get_record(args.table, args.sys_id, display_value=args.display_value)


def create_servicenow_record(clients: Clients, args: CreateRecordInput) -> Any:
    record = TableRecord(
        short_description=args.short_description,
        description=args.description,
        extra_fields=_extension(args, args.fields),
    )
    return clients.servicenow.create_record(args.table, record)


def update_servicenow_record(clients: Clients, args: UpdateRecordInput) -> Any:
    known = args.model_dump(exclude={"table", "sys_id", "fields"}, exclude_none=True)
    known = {k: v for k, v in known.items() if k in UpdateRecordInput.model_fields}
    record = TableRecord(**known, extra_fields=_extension(args, args.fields))
    return clients.servicenow.update_record(args.table, args.sys_id, record)


def delete_servicenow_record(clients: Clients, args: DeleteRecordInput) -> Any:
    return clients.servicenow.delete_record(args.table, args.sys_id)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="get_redmine_issues",
        agent_name="getRedmineIssues",
        description="Get issues from Redmine",
        params=GetRedmineIssuesInput,
        handler=get_redmine_issues,
    ),
    ToolSpec(
        name="get_redmine_issue",
        agent_name="getRedmineIssue",
        description="Get one Redmine issue by id",
        params=GetRedmineIssueInput,
        handler=get_redmine_issue,
    ),
    ToolSpec(
        name="create_redmine_issue",
        agent_name="createRedmineIssue",
        description="Create a new issue in Redmine",
        params=CreateRedmineIssueInput,
        handler=create_redmine_issue,
    ),
    ToolSpec(
        name="update_redmine_issue",
        agent_name="updateRedmineIssue",
        description="Update a Redmine issue. Only the fields you pass are changed.",
        params=UpdateRedmineIssueInput,
        handler=update_redmine_issue,
    ),
    ToolSpec(
        name="get_servicenow_incidents",
        agent_name="getServiceNowIncidents",
        description="Get incidents from ServiceNow",
        params=GetIncidentsInput,
        handler=get_servicenow_incidents,
    ),
    ToolSpec(
        name="create_servicenow_incident",
        agent_name="createServiceNowIncident",
        description="Create a new incident in ServiceNow",
        params=CreateIncidentInput,
        handler=create_servicenow_incident,
    ),
    ToolSpec(
        name="get_servicenow_records",
        agent_name="getServiceNowRecords",
        description=(
            "Get records from any ServiceNow table.\n"
            "Table examples: incident, problem, change_request, sc_request\n"
            f"{QUERY_SYNTAX_HELP}\n"
            "Known fields per table:\n"
            f"{describe_all()}"
        ),
        params=GetRecordsInput,
        handler=get_servicenow_records,
    ),
    ToolSpec(
        name="get_servicenow_record",
        agent_name="getServiceNowRecord",
        description="Get one record from any ServiceNow table by sys_id",
        params=GetRecordInput,
        handler=get_servicenow_record,
    ),
    ToolSpec(
        name="create_servicenow_record",
        agent_name="createServiceNowRecord",
        description="Create a record in any ServiceNow table (e.g. incident, problem, change_request)",
        params=CreateRecordInput,
        handler=create_servicenow_record,
    ),
    ToolSpec(
        name="update_servicenow_record",
        agent_name="updateServiceNowRecord",
        description="Update a record in any ServiceNow table by sys_id. Omitted fields are left unchanged.",
        params=UpdateRecordInput,
        handler=update_servicenow_record,
    ),
    ToolSpec(
        name="delete_servicenow_record",
        agent_name="deleteServiceNowRecord",
        description="Delete a record from any ServiceNow table by sys_id",
        params=DeleteRecordInput,
        handler=delete_servicenow_record,
    ),
)


class Registry:
    """Binds the tool catalog to a set of clients and runs validated invocations."""

    def __init__(self, clients: Clients, specs: tuple[ToolSpec, ...] = TOOLS) -> None:
        self.clients = clients
        self._by_name: dict[str, ToolSpec] = {}
        for spec in specs:
            for key in (spec.name, spec.agent_name):
                if key in self._by_name:
                    raise ValueError(f"Duplicate tool name '{key}'")
                self._by_name[key] = spec
        self._specs = specs

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def get(self, name: str) -> ToolSpec:
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownTool(name) from None

    def validate(self, spec: ToolSpec, arguments: Mapping[str, Any] | None) -> BaseModel:
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, Mapping):
            raise InvalidInput(spec.name, [], "arguments must be an object")
        try:
            return spec.params.model_validate(dict(arguments))
        except ValidationError as exc:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors() if err["loc"]})
            raise InvalidInput(spec.name, fields, exc.errors()[0]["msg"]) from exc

    def invoke(self, name: str, arguments: Mapping[str, Any] | None = None) -> Any:
        spec = self.get(name)
        args = self.validate(spec, arguments)
        logger.info("Invoking tool %s", spec.name)
        return spec.handler(self.clients, args)
