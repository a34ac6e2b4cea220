from pathlib import Path

import yaml
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    install_namespace: str = "tekton-dashboard"
    pipelines_namespace: str = ""
    triggers_namespace: str = ""
    tenant_namespace: str = ""
    read_only: bool = True
    logout_url: str = ""
    stream_logs: bool = False
    external_logs_url: str = ""
    kube_api_url: str = ""
    proxy_timeout_seconds: float | None = None
    probe_timeout_seconds: float = 10.0
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 9097
    config_path: str = ""

    model_config = {"env_prefix": "DASHBOARD_"}

    def get_pipelines_namespace(self) -> str:
        return self.pipelines_namespace or self.install_namespace

    def get_triggers_namespace(self) -> str:
        return self.triggers_namespace or self.install_namespace


def load_options_file(path: str) -> dict:
    """Load dashboard options from a YAML mapping."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Options file not found: {config_path}")
    with open(config_path) as f:
        options = yaml.safe_load(f) or {}
    if not isinstance(options, dict):
        raise ValueError(f"Options file must contain a mapping: {config_path}")
    return options


def load_settings() -> Settings:
    """Build settings from the environment, overlaid with the options file when set."""
    settings = Settings()
    if not settings.config_path:
        return settings
    options = load_options_file(settings.config_path)
    return Settings(**{**options, "config_path": settings.config_path})
