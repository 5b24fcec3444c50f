"""
Route handlers for model listing operations.
"""
from fastapi import APIRouter
from models.api_models import ModelCard, ModelList
from models.chat_models import ChatModel

router = APIRouter()


@router.get("/v1/models")
async def list_models() -> ModelList:
    """List every model the bridge can serve."""
    return ModelList(data=[ModelCard(id=model.public_id) for model in ChatModel])
