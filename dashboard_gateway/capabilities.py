"""Detection of optional Tekton components."""

from .kube import KubeClient
from .versions import TRIGGERS_CONTROLLER_SELECTOR, TRIGGERS_INFO_CONFIGMAP


async def is_triggers_installed(kube: KubeClient, namespace: str) -> bool:
    """True when Tekton Triggers resources exist in namespace. Lookup failures count as absent."""
    if await kube.get_configmap(namespace, TRIGGERS_INFO_CONFIGMAP) is not None:
        return True
    deployments = await kube.list_deployments(namespace, TRIGGERS_CONTROLLER_SELECTOR)
    return len(deployments) > 0
