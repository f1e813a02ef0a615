from typing import List

from fastapi import APIRouter, Depends, HTTPException

from purchase_app.core.auth import get_api_key_service
from purchase_app.models import ApiKeyIn, ApiKeyOut
from purchase_app.services.api_keys import ApiKeyService

"""API key endpoints. These do not require authentication."""

router = APIRouter(prefix="/api/apikeys", tags=["api keys"])


@router.post("", response_model=ApiKeyOut, status_code=201, summary="Create an API key")
async def create_api_key(
    payload: ApiKeyIn, svc: ApiKeyService = Depends(get_api_key_service)
):
    return svc.create(payload)


@router.get("", response_model=List[ApiKeyOut], summary="List API keys")
async def list_api_keys(svc: ApiKeyService = Depends(get_api_key_service)):
    return svc.list()


@router.get("/{key_id}", response_model=ApiKeyOut, summary="Get an API key")
async def get_api_key(key_id: int, svc: ApiKeyService = Depends(get_api_key_service)):
    key = svc.get(key_id)
    if key is None:
        raise HTTPException(status_code=404, detail="api key not found")
    return key


@router.delete("/{key_id}", status_code=204, summary="Delete an API key")
async def delete_api_key(key_id: int, svc: ApiKeyService = Depends(get_api_key_service)):
    if not svc.delete(key_id):
        raise HTTPException(status_code=404, detail="api key not found")
    return None
