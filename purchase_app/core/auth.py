"""API key check for the purchase endpoints.

Key resolution order: ``X-API-Key`` header, ``apiKey`` query parameter, then
``settings.default_api_key``. CORS preflight requests are answered by the
CORS middleware before routing, so they never reach this dependency.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Query, Request
from fastapi.security import APIKeyHeader
from starlette import status

from purchase_app.db.dal import Database
from purchase_app.services.api_keys import ApiKeyService

API_KEY_HEADER = "X-API-Key"

_header_scheme = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


def get_db(request: Request) -> Database:
    return Database(request.app.state.settings.db_path)


def get_api_key_service(db: Database = Depends(get_db)) -> ApiKeyService:
    return ApiKeyService(db)


def require_api_key(
    request: Request,
    header_key: Optional[str] = Depends(_header_scheme),
    query_key: Optional[str] = Query(None, alias="apiKey", include_in_schema=False),
    keys: ApiKeyService = Depends(get_api_key_service),
) -> str:
    api_key = header_key or query_key or request.app.state.settings.default_api_key
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key is required. Please provide X-API-Key header or apiKey query parameter.",
        )
    if not keys.is_valid(api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired API key.",
        )
    return api_key
