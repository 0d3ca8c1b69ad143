from functools import lru_cache

from app.services.query_service import QueryService
from app.settings import get_settings


@lru_cache()
def get_query_service() -> QueryService:
    """
    Singleton-ish QueryService for the FastAPI app.

    Uses centralized Settings so configuration is loaded once and injected.
    Database sessions are still opened per request.
    """
    settings = get_settings()
    return QueryService(settings=settings)
