from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status

from thrift_store.api.dependencies import get_product_api
from thrift_store.application.interfaces.product_api import ProductApi, ProductApiError

router = APIRouter(prefix="/products", tags=["products"])


async def _fetch(call: Any) -> dict[str, Any]:
    try:
        return await call
    except ProductApiError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc


@router.get("")
async def browse_products(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=8, ge=1, le=100),
    api: ProductApi = Depends(get_product_api),
) -> dict[str, Any]:
    """One page of listings, as returned by the backend."""
    return await _fetch(api.list_products(page=page, limit=limit))


@router.get("/recent")
async def recent_products(
    limit: int = Query(default=4, ge=1, le=50),
    api: ProductApi = Depends(get_product_api),
) -> dict[str, Any]:
    return await _fetch(api.list_products(sort="createdAt", order="desc", limit=limit))


@router.get("/trending")
async def trending_products(
    limit: int = Query(default=4, ge=1, le=50),
    api: ProductApi = Depends(get_product_api),
) -> dict[str, Any]:
    return await _fetch(api.list_products(sort="views", order="desc", limit=limit))


@router.get("/ending")
async def ending_products(
    limit: int = Query(default=4, ge=1, le=50),
    api: ProductApi = Depends(get_product_api),
) -> dict[str, Any]:
    """Auctions closest to their end time."""
    return await _fetch(api.list_products(sort="endTime", order="asc", limit=limit))


@router.get("/mine")
async def my_products(api: ProductApi = Depends(get_product_api)) -> dict[str, Any]:
    return await _fetch(api.my_products())


@router.get("/{product_id}")
async def get_product(
    product_id: str,
    api: ProductApi = Depends(get_product_api),
) -> dict[str, Any]:
    return await _fetch(api.get_product(product_id))
