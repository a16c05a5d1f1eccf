"""Error kinds shared by the adapters, the tool registry and the agent boundary."""


class BrainError(RuntimeError):
    """Base class for every error raised by ebrain."""


class InvalidInput(BrainError):
    """Tool arguments failed validation before any network call."""

    def __init__(self, tool: str, fields: list[str], message: str) -> None:
        self.tool = tool
        self.fields = fields
        names = ", ".join(fields) or "(input)"
        super().__init__(f"Invalid input for {tool}: {names}: {message}")


class UnknownTool(BrainError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool '{name}'")


class RemoteRequestFailure(BrainError):
    """Non-2xx response or transport failure talking to a remote system."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class RemoteNotFound(RemoteRequestFailure):
    """The remote system reports no such record."""


class UpstreamAgentFailure(BrainError):
    """The agent inference loop failed."""
