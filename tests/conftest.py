import httpx
import pytest
from fastapi.testclient import TestClient

from dashboard_gateway.config import Settings
from dashboard_gateway.dependencies import (
    get_kube_api_url,
    get_kube_client,
    get_kube_http_client,
    get_logs_http_client,
    get_settings,
)
from dashboard_gateway.main import app
from dashboard_gateway.versions import TRIGGERS_CONTROLLER_SELECTOR

BACKEND_URL = "http://backend.test"
LOGS_URL = "http://logs.example.com"


class FakeKube:
    """Stands in for KubeClient: canned ConfigMaps and Deployments keyed by namespace."""

    def __init__(self, configmaps=None, deployments=None):
        self.configmaps = configmaps or {}
        self.deployments = deployments or {}
        self.calls = []

    async def get_configmap(self, namespace, name):
        self.calls.append(("configmap", namespace, name))
        return self.configmaps.get((namespace, name))

    async def list_deployments(self, namespace, label_selector):
        self.calls.append(("deployments", namespace, label_selector))
        return self.deployments.get((namespace, label_selector), [])


def deployment(**labels):
    return {"metadata": {"name": "controller", "labels": labels}}


def pipelines_installed(namespace, version="v0.24.1"):
    return {(namespace, "pipelines-info"): {"data": {"version": version}}}


def triggers_deployment(namespace, version="v0.14.2"):
    return {(namespace, TRIGGERS_CONTROLLER_SELECTOR): [deployment(**{"app.kubernetes.io/version": version})]}


class TrackedStream(httpx.AsyncByteStream):
    """Unread response body served in chunks; remembers whether it was closed."""

    def __init__(self, body, chunk_size=4096):
        self._body = body
        self._chunk_size = chunk_size
        self.closed = False

    async def __aiter__(self):
        for start in range(0, len(self._body), self._chunk_size):
            yield self._body[start:start + self._chunk_size]

    async def aclose(self):
        self.closed = True


class Recorder:
    """MockTransport handler that records requests and answers with a canned response.

    The responder builds an ordinary httpx.Response; its body is re-served as an
    unread stream, the way a real upstream connection delivers it.
    """

    def __init__(self, responder=None):
        self.requests = []
        self.streams = []
        self._responder = responder or (lambda request: httpx.Response(200, content=b"ok"))

    def __call__(self, request):
        self.requests.append(request)
        canned = self._responder(request)
        stream = TrackedStream(canned.content)
        self.streams.append(stream)
        return httpx.Response(canned.status_code, headers=canned.headers.raw, stream=stream)


@pytest.fixture
def settings():
    return Settings(
        install_namespace="tekton-dashboard",
        pipelines_namespace="tekton-pipelines",
        external_logs_url="",
    )


@pytest.fixture
def kube():
    return FakeKube()


@pytest.fixture
def make_client(settings, kube):
    """Build a TestClient whose outbound HTTP goes to the given MockTransport handler."""

    def _make(handler=None, settings_override=None):
        handler = handler or Recorder()
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        active_settings = settings_override or settings
        app.dependency_overrides[get_settings] = lambda: active_settings
        app.dependency_overrides[get_kube_client] = lambda: kube
        app.dependency_overrides[get_kube_api_url] = lambda: BACKEND_URL
        app.dependency_overrides[get_kube_http_client] = lambda: http_client
        app.dependency_overrides[get_logs_http_client] = lambda: http_client
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()
