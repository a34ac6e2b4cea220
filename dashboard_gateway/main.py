"""Dashboard gateway — Kubernetes API proxy and installation discovery."""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import load_settings
from .kube import KubeClient, api_base_url, build_api_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: load settings, open the httpx pools for the API server and the logs backend."""
    settings = load_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    kube_api_url = api_base_url(settings)
    probe_http_client = build_api_client(timeout=settings.probe_timeout_seconds)
    kube_http_client = build_api_client(timeout=settings.proxy_timeout_seconds)
    logs_http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.proxy_timeout_seconds),
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
    )

    app.state.settings = settings
    app.state.kube_api_url = kube_api_url
    app.state.kube_client = KubeClient(probe_http_client, kube_api_url)
    app.state.kube_http_client = kube_http_client
    app.state.logs_http_client = logs_http_client
    logger.info(
        "Dashboard gateway started — namespace=%s api=%s read_only=%s",
        settings.install_namespace, kube_api_url, settings.read_only,
    )

    yield

    await probe_http_client.aclose()
    await kube_http_client.aclose()
    await logs_http_client.aclose()
    logger.info("Dashboard gateway stopped")


app = FastAPI(title="Dashboard Gateway", version="0.1.0", lifespan=lifespan)


# --- Error handling ---


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# --- Probes ---


@app.get("/health")
async def health():
    """Liveness check."""
    return {"status": "healthy"}


@app.get("/readiness")
async def readiness():
    return {"status": "ready"}


# --- Mount routers ---

from .router_properties import router as properties_router  # noqa: E402
from .router_proxy import router as proxy_router  # noqa: E402

app.include_router(properties_router)
app.include_router(proxy_router)
