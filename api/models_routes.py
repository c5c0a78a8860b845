"""Model listing endpoint."""

from fastapi import APIRouter

from config.settings import get_settings
from services.generation_client import build_model_chain

router = APIRouter()


@router.get("/models")
async def list_models():
    """Active provider and the order models will be tried in."""
    settings = get_settings()
    return {
        "provider": settings.llm_provider,
        "preferred": settings.preferred_model() or None,
        "chain": build_model_chain(settings.preferred_model(), settings.fallback_chain()),
        "mockGeneration": settings.mock_generation,
    }
