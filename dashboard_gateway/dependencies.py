"""Request-scoped accessors for objects created in the app lifespan."""

import httpx
from fastapi import Request

from .config import Settings
from .kube import KubeClient


def _require_state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"Application state '{name}' is not initialized")
    return value


def get_settings(request: Request) -> Settings:
    return _require_state(request, "settings")


def get_kube_client(request: Request) -> KubeClient:
    return _require_state(request, "kube_client")


def get_kube_http_client(request: Request) -> httpx.AsyncClient:
    """Client for the Kubernetes API proxy."""
    return _require_state(request, "kube_http_client")


def get_logs_http_client(request: Request) -> httpx.AsyncClient:
    """Client for the external logs proxy."""
    return _require_state(request, "logs_http_client")


def get_kube_api_url(request: Request) -> str:
    return _require_state(request, "kube_api_url")
