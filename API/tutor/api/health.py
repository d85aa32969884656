from fastapi import APIRouter

from tutor.core.settings import settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "service": "ncert-tutor-api",
        "model": settings.ai_model,
        "gateway_configured": bool(settings.ai_gateway_api_key),
    }
