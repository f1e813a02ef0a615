from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness probe")
async def health(request: Request):
    return {
        "status": "ok",
        "catalog_loaded": request.app.state.currency_service.catalog_loaded,
    }
