"""Discovery route — GET /v1/properties."""

from fastapi import APIRouter, Depends

from .config import Settings
from .dependencies import get_kube_client, get_settings
from .kube import KubeClient
from .models import Properties
from .properties import get_properties

router = APIRouter(prefix="/v1", tags=["properties"])


@router.get("/properties", response_model=Properties, response_model_exclude_none=True)
async def properties(
    settings: Settings = Depends(get_settings),
    kube: KubeClient = Depends(get_kube_client),
):
    """Installed namespaces and versions, plus the dashboard's operating mode."""
    return await get_properties(settings, kube)
