# =============================================================================
# app/routers/search.py - External Search Proxy
# =============================================================================
# Forwards query parameters unchanged to the external search function and
# relays its JSON body.
# =============================================================================

import logging
from collections.abc import AsyncIterator
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import SearchProxyError

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_search_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """HTTP client used to reach the search function (overridable in tests)."""
    async with httpx.AsyncClient(timeout=settings.SEARCH_TIMEOUT_SECONDS) as client:
        yield client


SearchHttpClientDep = Annotated[httpx.AsyncClient, Depends(get_search_http_client)]


@router.get("/search")
async def search(request: Request, client: SearchHttpClientDep):
    """
    Proxy a search request to the external search function.

    All query parameters are passed through as-is.
    """
    params = list(request.query_params.multi_items())
    logger.info(f"Proxying search with {len(params)} params")

    try:
        response = await client.get(settings.SEARCH_FUNCTION_URL, params=params)
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Search API error: {e}")
        raise SearchProxyError(str(e))

    return JSONResponse(content=data)
