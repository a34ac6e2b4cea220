from pydantic import BaseModel, ConfigDict, Field, model_validator


# --- Properties ---


class Properties(BaseModel):
    """Installation details the dashboard frontend reads at startup.

    Optional fields are None when absent and are left out of the JSON body.
    """

    model_config = ConfigDict(populate_by_name=True)

    dashboard_namespace: str = Field(..., alias="DashboardNamespace")
    dashboard_version: str = Field("", alias="DashboardVersion")
    pipeline_namespace: str = Field(..., alias="PipelineNamespace")
    pipeline_version: str = Field("", alias="PipelineVersion")
    triggers_namespace: str | None = Field(None, alias="TriggersNamespace")
    triggers_version: str | None = Field(None, alias="TriggersVersion")
    read_only: bool = Field(..., alias="ReadOnly")
    logout_url: str | None = Field(None, alias="LogoutURL")
    tenant_namespace: str | None = Field(None, alias="TenantNamespace")
    stream_logs: bool = Field(False, alias="StreamLogs")
    external_logs_url: str | None = Field(None, alias="ExternalLogsURL")

    @model_validator(mode="after")
    def validate_triggers_pair(self):
        if (self.triggers_namespace is None) != (self.triggers_version is None):
            raise ValueError("TriggersNamespace and TriggersVersion must be set together")
        return self

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# --- Errors ---


class ErrorResponse(BaseModel):
    error: str
    detail: str | None = None
