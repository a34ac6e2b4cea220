"""Read-only Kubernetes API access used by the discovery probes and the API proxy."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import httpx

from .config import Settings

SERVICE_ACCOUNT_TOKEN_PATH = Path("/var/run/secrets/kubernetes.io/serviceaccount/token")
SERVICE_ACCOUNT_CA_PATH = Path("/var/run/secrets/kubernetes.io/serviceaccount/ca.crt")

logger = logging.getLogger(__name__)


def api_base_url(settings: Settings) -> str:
    if settings.kube_api_url:
        return settings.kube_api_url.rstrip("/")
    host = os.getenv("KUBERNETES_SERVICE_HOST")
    port = os.getenv("KUBERNETES_SERVICE_PORT_HTTPS", "443")
    if host:
        return f"https://{host}:{port}"
    return "https://kubernetes.default.svc"


def _read_service_account_token() -> str | None:
    if not SERVICE_ACCOUNT_TOKEN_PATH.exists():
        return None
    return SERVICE_ACCOUNT_TOKEN_PATH.read_text(encoding="utf-8").strip()


def _verify_target() -> str | bool:
    if SERVICE_ACCOUNT_CA_PATH.exists():
        return str(SERVICE_ACCOUNT_CA_PATH)
    return True


def build_api_client(timeout: float | None) -> httpx.AsyncClient:
    """AsyncClient carrying the service account credentials, when running in-cluster."""
    headers = {}
    token = _read_service_account_token()
    if token:
        headers["Authorization"] = f"Bearer {token}"
    else:
        logger.warning("No service account token found; Kubernetes API calls are unauthenticated")
    return httpx.AsyncClient(
        headers=headers,
        verify=_verify_target(),
        timeout=httpx.Timeout(timeout),
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
    )


class KubeClient:
    """Reads ConfigMaps and Deployments. Lookups never raise; failures yield None/empty."""

    def __init__(self, http_client: httpx.AsyncClient, base_url: str):
        self._http = http_client
        self._base_url = base_url.rstrip("/")

    async def _get(self, path: str, params: dict[str, str] | None = None) -> dict[str, Any] | None:
        url = f"{self._base_url}{path}"
        try:
            response = await self._http.get(url, params=params)
        except httpx.HTTPError as e:
            logger.warning("Kubernetes API GET %s failed: %s", path, e)
            return None
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            logger.warning(
                "Kubernetes API GET %s failed (%d): %s",
                path, response.status_code, response.text.strip()[:500],
            )
            return None
        try:
            payload = response.json()
        except ValueError:
            logger.warning("Kubernetes API returned invalid JSON for GET %s", path)
            return None
        if not isinstance(payload, dict):
            logger.warning("Kubernetes API returned non-object JSON for GET %s", path)
            return None
        return payload

    async def get_configmap(self, namespace: str, name: str) -> dict[str, Any] | None:
        return await self._get(f"/api/v1/namespaces/{namespace}/configmaps/{name}")

    async def list_deployments(self, namespace: str, label_selector: str) -> list[dict[str, Any]]:
        payload = await self._get(
            f"/apis/apps/v1/namespaces/{namespace}/deployments",
            params={"labelSelector": label_selector},
        )
        if payload is None:
            return []
        items = payload.get("items", [])
        if not isinstance(items, list):
            return []
        return [item for item in items if isinstance(item, dict)]
