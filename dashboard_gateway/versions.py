"""Installed version lookups for the dashboard, Tekton Pipelines and Tekton Triggers.

Every probe returns an empty string when the version cannot be determined.
"""

import logging
from typing import Any

from .kube import KubeClient

logger = logging.getLogger(__name__)

VERSION_LABEL = "app.kubernetes.io/version"

DASHBOARD_SELECTOR = (
    "app.kubernetes.io/part-of=tekton-dashboard,"
    "app.kubernetes.io/component=dashboard,"
    "app.kubernetes.io/name=dashboard"
)
PIPELINES_CONTROLLER_SELECTOR = (
    "app.kubernetes.io/part-of=tekton-pipelines,"
    "app.kubernetes.io/component=controller,"
    "app.kubernetes.io/name=controller"
)
TRIGGERS_CONTROLLER_SELECTOR = (
    "app.kubernetes.io/part-of=tekton-triggers,"
    "app.kubernetes.io/component=controller,"
    "app.kubernetes.io/name=controller"
)

PIPELINES_INFO_CONFIGMAP = "pipelines-info"
TRIGGERS_INFO_CONFIGMAP = "triggers-info"


def _label_version(deployments: list[dict[str, Any]], labels: tuple[str, ...]) -> str:
    for deployment in deployments:
        deployment_labels = (deployment.get("metadata") or {}).get("labels") or {}
        for label in labels:
            value = deployment_labels.get(label)
            if isinstance(value, str) and value:
                return value
    return ""


async def _configmap_version(kube: KubeClient, namespace: str, name: str) -> str:
    configmap = await kube.get_configmap(namespace, name)
    if configmap is None:
        return ""
    version = (configmap.get("data") or {}).get("version", "")
    return version if isinstance(version, str) else ""


async def get_dashboard_version(kube: KubeClient, namespace: str) -> str:
    deployments = await kube.list_deployments(namespace, DASHBOARD_SELECTOR)
    version = _label_version(deployments, (VERSION_LABEL,))
    if not version:
        logger.warning("Could not determine the dashboard version in namespace %s", namespace)
    return version


async def get_pipelines_version(kube: KubeClient, namespace: str) -> str:
    version = await _configmap_version(kube, namespace, PIPELINES_INFO_CONFIGMAP)
    if version:
        return version
    deployments = await kube.list_deployments(namespace, PIPELINES_CONTROLLER_SELECTOR)
    version = _label_version(deployments, (VERSION_LABEL, "pipeline.tekton.dev/release"))
    if not version:
        logger.warning("Could not determine the Tekton Pipelines version in namespace %s", namespace)
    return version


async def get_triggers_version(kube: KubeClient, namespace: str) -> str:
    version = await _configmap_version(kube, namespace, TRIGGERS_INFO_CONFIGMAP)
    if version:
        return version
    deployments = await kube.list_deployments(namespace, TRIGGERS_CONTROLLER_SELECTOR)
    version = _label_version(deployments, (VERSION_LABEL, "triggers.tekton.dev/release"))
    if not version:
        logger.warning("Could not determine the Tekton Triggers version in namespace %s", namespace)
    return version
