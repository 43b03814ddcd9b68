from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from islanders.core.runtime import Runtime
from islanders.core.schemas import CatalogItem, SearchQuery
from islanders.core.search import SORT_KEYS, search_catalog

from .deps import get_runtime
from .schemas import SearchResponse


router = APIRouter(prefix="/api/v1/catalog", tags=["catalog"])


@router.get("/items/{item_id}", response_model=CatalogItem)
async def get_item(item_id: str, runtime: Runtime = Depends(get_runtime)) -> CatalogItem:
    item = await runtime.stores.catalog.get_item(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return item


@router.post("/search", response_model=SearchResponse)
async def search(query: SearchQuery, runtime: Runtime = Depends(get_runtime)) -> SearchResponse:
    if query.sort_by and query.sort_by not in SORT_KEYS:
        raise HTTPException(
            status_code=422,
            detail=f"sort_by must be one of: {', '.join(sorted(SORT_KEYS))}",
        )
    items = search_catalog(await runtime.stores.catalog.list_items(), query)
    return SearchResponse(items=items, total=len(items))
