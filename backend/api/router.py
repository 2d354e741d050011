from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_engine
from config import settings
from models.requests import RecommendRequest
from models.responses import ErrorDetail, ErrorResponse, RecommendResponse
from services.pipeline.orchestrator import CareerMatchingEngine
from services.vector_store import SupabaseVectorStore

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)

NO_MATCHES_MESSAGE = (
    "No career matches found. Try adjusting your preferences or adding more details."
)


@router.get("/health")
async def health(engine: CareerMatchingEngine = Depends(get_engine)):
    vector_store = next(
        (p for p in engine.retrieval.providers if isinstance(p, SupabaseVectorStore)), None
    )
    return {
        "status": "ok",
        "gemini_configured": bool(settings.gemini_api_key),
        "vector_store_configured": bool(vector_store and vector_store.is_configured),
        "catalog_loaded": engine.catalog.is_loaded,
    }


@router.post(
    "/compass/recommend",
    response_model=RecommendResponse,
    responses={404: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def recommend(
    request: Request,
    body: RecommendRequest,
    engine: CareerMatchingEngine = Depends(get_engine),
):
    result = await engine.match(body.profile, body.preferences, body.options)

    if not result.matches:
        error = ErrorResponse(error=ErrorDetail(code="NO_MATCHES", message=NO_MATCHES_MESSAGE))
        return JSONResponse(status_code=404, content=error.model_dump())

    return RecommendResponse(recommendations=result.matches, metadata=result.metadata)
