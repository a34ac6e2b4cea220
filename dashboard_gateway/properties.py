"""Properties aggregation: configuration plus what the cluster probes report."""

import logging

from .capabilities import is_triggers_installed
from .config import Settings
from .kube import KubeClient
from .models import Properties
from .versions import get_dashboard_version, get_pipelines_version, get_triggers_version

logger = logging.getLogger(__name__)

LOGS_PROXY_PATH = "/v1/logs-proxy"


async def get_properties(settings: Settings, kube: KubeClient) -> Properties:
    """Assemble the properties record.

    Probes run one after another and degrade to empty values, so this
    always returns a record.
    """
    pipelines_namespace = settings.get_pipelines_namespace()
    triggers_namespace = settings.get_triggers_namespace()

    dashboard_version = await get_dashboard_version(kube, settings.install_namespace)
    pipelines_version = await get_pipelines_version(kube, pipelines_namespace)

    # Only presence matters; the real URL stays behind the logs proxy.
    external_logs_url = LOGS_PROXY_PATH if settings.external_logs_url else None

    triggers = {}
    if await is_triggers_installed(kube, triggers_namespace):
        triggers = {
            "triggers_namespace": triggers_namespace,
            "triggers_version": await get_triggers_version(kube, triggers_namespace),
        }
    else:
        logger.debug("Tekton Triggers not detected in namespace %s", triggers_namespace)

    return Properties(
        dashboard_namespace=settings.install_namespace,
        dashboard_version=dashboard_version,
        pipeline_namespace=pipelines_namespace,
        pipeline_version=pipelines_version,
        read_only=settings.read_only,
        logout_url=settings.logout_url or None,
        tenant_namespace=settings.tenant_namespace or None,
        stream_logs=settings.stream_logs,
        external_logs_url=external_logs_url,
        **triggers,
    )
