"""Tracing configuration for the observability sink."""

from pydantic import BaseModel


class TraceFilters(BaseModel):
    """Indexing fields flattened into every trace record."""

    team_id: str | int | None = None
    user_id: str | int | None = None
    resource_id: str | int | None = None
    tags: list[str] = []

    def flattened(self) -> dict[str, object]:
        """Filter fields as the sink expects them (ids always strings)."""
        data: dict[str, object] = {}
        for key, value in (
            ("teamId", self.team_id),
            ("userId", self.user_id),
            ("resourceId", self.resource_id),
        ):
            if value not in (None, ""):
                data[key] = str(value)
        if self.tags:
            data["tags"] = list(self.tags)
        return data


class TracingConfig(BaseModel):
    """Where and how to send traces. Disabled unless ``enabled`` is set."""

    enabled: bool = False
    api_url: str | None = None
    tenant_id: str | None = None
    service_key: str | None = None
    prompt_name: str | None = None
    execution_id: str | None = None
    filters: TraceFilters = TraceFilters()

    @property
    def complete(self) -> bool:
        return bool(self.api_url and self.tenant_id and self.service_key)

    @property
    def url(self) -> str:
        return f"{(self.api_url or '').rstrip('/')}/tenants/{self.tenant_id}/traces"
