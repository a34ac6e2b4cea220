"""Proxy routes.

Endpoints:
  ANY /proxy/{subpath}          — Kubernetes API server
  ANY /v1/logs-proxy/{subpath}  — external logs backend, when configured
"""

import httpx
from fastapi import APIRouter, Depends, Request

from .config import Settings
from .dependencies import get_kube_api_url, get_kube_http_client, get_logs_http_client, get_settings
from .forwarder import forward
from .http_utils import error_response
from .properties import LOGS_PROXY_PATH

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

router = APIRouter(tags=["proxy"])


@router.api_route("/proxy/{subpath:path}", methods=PROXY_METHODS)
async def proxy_kube_api(
    request: Request,
    subpath: str,
    kube_api_url: str = Depends(get_kube_api_url),
    http_client: httpx.AsyncClient = Depends(get_kube_http_client),
):
    return await forward(request, subpath, kube_api_url, http_client)


@router.api_route(LOGS_PROXY_PATH + "/{subpath:path}", methods=PROXY_METHODS)
async def proxy_external_logs(
    request: Request,
    subpath: str,
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_logs_http_client),
):
    if not settings.external_logs_url:
        return error_response(404, "External logs are not configured")
    return await forward(request, subpath, settings.external_logs_url.rstrip("/"), http_client)
