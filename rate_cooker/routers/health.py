from fastapi import APIRouter, Depends

from rate_cooker.core.config import Settings
from .deps import get_app_settings

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness and configuration summary")
async def health(settings: Settings = Depends(get_app_settings)):
    return {
        "status": "ok",
        "version": settings.version,
        "store_backend": settings.rate_store_backend,
        "provider": settings.exchange_rate_provider,
        "currencies_count": len(settings.currencies),
    }
