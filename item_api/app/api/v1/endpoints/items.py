"""
Item endpoints for API v1.

Two families of routes share the ``/items`` prefix:

* ``GET /items/{id}``, ``GET /items/`` and ``POST /items/`` call the
  store directly.  A database error surfaces as HTTP 500.
* ``/items/by-id``, ``/items/create``, ``/items/update``,
  ``/items/delete``, ``/items/search`` and ``/items/info`` run on the
  bounded executor with a deadline.  Store failures resolve to the
  operation's fallback value, which these handlers map to 404 (or 503
  for a failed create) rather than 500.

The fixed paths are declared before ``/{item_id}`` so they are not
captured by it.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import PlainTextResponse

from item_api.app.api.deps import get_item_service
from item_api.app.schemas.item import ItemCreate, ItemRead, ItemUpdate
from item_api.app.services.item_service import ItemService

router = APIRouter()


# -------------------- Async endpoints --------------------

@router.get("/by-id", response_model=ItemRead)
async def get_item_async(
    item_id: int = Query(..., alias="id"),
    service: ItemService = Depends(get_item_service),
) -> ItemRead:
    """Retrieve an item by ID through the worker pool.

    Returns HTTP 404 if the item does not exist or could not be read
    within the deadline.
    """
    item = await service.get_item_async(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return item


@router.post("/create", response_model=ItemRead, status_code=status.HTTP_201_CREATED)
async def create_item_async(
    item_in: ItemCreate,
    service: ItemService = Depends(get_item_service),
) -> ItemRead:
    """Create an item through the worker pool.

    Returns HTTP 503 if the item could not be stored within the deadline.
    """
    item = await service.create_item_async(item_in)
    if item is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Item could not be created",
        )
    return item


@router.get("/info", response_class=PlainTextResponse)
async def get_combined_item_info(
    item_id: int = Query(..., alias="id"),
    keyword: Optional[str] = Query(None, min_length=1),
    service: ItemService = Depends(get_item_service),
) -> str:
    """Describe an item and count related items.

    The item lookup and the search for ``keyword`` (or the configured
    default keyword) run concurrently.  Always answers 200 with a
    plain text description.
    """
    return await service.get_combined_item_info(item_id, keyword)


@router.put("/update", response_model=ItemRead)
async def update_item_async(
    item_in: ItemUpdate,
    item_id: int = Query(..., alias="id"),
    service: ItemService = Depends(get_item_service),
) -> ItemRead:
    """Replace the name and category of an item."""
    item = await service.update_item_async(item_id, item_in)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return item


@router.delete("/delete", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item_async(
    item_id: int = Query(..., alias="id"),
    service: ItemService = Depends(get_item_service),
) -> Response:
    """Delete an item; 404 if it does not exist."""
    deleted = await service.delete_item_async(item_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/search", response_model=List[ItemRead])
async def search_items_async(
    keyword: str = Query(...),
    service: ItemService = Depends(get_item_service),
) -> List[ItemRead]:
    """Items whose name or category contains ``keyword`` (case insensitive).

    An empty keyword matches every item.
    """
    return await service.search_items_async(keyword)


# -------------------- Blocking endpoints --------------------

@router.get("/", response_model=List[ItemRead])
def list_items(
    category: Optional[str] = Query(None),
    name: Optional[str] = Query(None),
    service: ItemService = Depends(get_item_service),
) -> List[ItemRead]:
    """List items, optionally filtered by exact ``category`` and ``name``."""
    return service.list_items(category=category, name=name)


@router.post("/", response_model=ItemRead, status_code=status.HTTP_201_CREATED)
def create_item(
    item_in: ItemCreate,
    service: ItemService = Depends(get_item_service),
) -> ItemRead:
    return service.create_item(item_in)


@router.get("/{item_id}", response_model=ItemRead)
def get_item(
    item_id: int,
    service: ItemService = Depends(get_item_service),
) -> ItemRead:
    """Retrieve a single item by ID.

    Returns HTTP 404 if the item is not found.
    """
    item = service.get_item(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return item
