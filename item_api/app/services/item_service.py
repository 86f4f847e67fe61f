"""
Service layer for items.

``ItemService`` offers two families of operations over an
:class:`~item_api.app.services.item_store.ItemStore`:

* Blocking operations (``get_item``, ``list_items``, ``create_item``)
  call the store directly.  Store errors propagate to the caller.
* Asynchronous operations (``*_async`` and ``get_combined_item_info``)
  submit the store work to a :class:`BoundedExecutor` and wait for it
  under a deadline.  A timeout, an executor rejection or a store error
  is logged, recorded and replaced by the operation's fallback value,
  so these coroutines never raise for store failures:

  ========================  ==============  =========
  operation                 not found       fallback
  ========================  ==============  =========
  ``get_item_async``        ``None``        ``None``
  ``create_item_async``     n/a             ``None``
  ``update_item_async``     ``None``        ``None``
  ``delete_item_async``     ``False``       ``False``
  ``search_items_async``    ``[]``          ``[]``
  ========================  ==============  =========

  "Not found" and "failed" produce the same value; the recorded
  fallback events tell them apart.

The executor and recorder are passed in explicitly so that tests (and
several applications in one process) do not share a hidden global pool.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, TypeVar

from item_api.app.core.diagnostics import FallbackRecorder
from item_api.app.core.executor import BoundedExecutor
from item_api.app.core.fallback import combine, with_timeout
from item_api.app.schemas.item import ItemCreate, ItemRead, ItemUpdate
from item_api.app.services.item_store import ItemStore


T = TypeVar("T")

ITEM_NOT_FOUND = "Item not found"
COMBINED_INFO_ERROR = "Error fetching combined info"


def matches_keyword(item: ItemRead, keyword: str) -> bool:
    """Case-insensitive substring match on the item's name or category."""
    needle = keyword.lower()
    return needle in item.name.lower() or needle in item.category.lower()


def describe_item_info(item: Optional[ItemRead], related: List[ItemRead]) -> str:
    """Build the combined info string from an item and its related items."""
    if item is None:
        return ITEM_NOT_FOUND
    return f"Item: {item.name} (related found: {len(related)})"


class ItemService:
    """Blocking and asynchronous operations on items.

    Parameters
    ----------
    store : ItemStore
        Persistence backend.  Any object with the same methods works.
    executor : BoundedExecutor
        Pool running the store calls of the asynchronous operations.
    recorder : Optional[FallbackRecorder]
        Receives an event for every fallback.
    timeout : float
        Deadline in seconds of each asynchronous operation.
    combine_timeout : float
        Deadline in seconds of ``get_combined_item_info``.
    related_keyword : str
        Keyword searched by ``get_combined_item_info`` when none is given.
    """

    def __init__(
        self,
        store: ItemStore,
        executor: BoundedExecutor,
        recorder: Optional[FallbackRecorder] = None,
        timeout: float = 2.0,
        combine_timeout: float = 5.0,
        related_keyword: str = "DEFAULT_KEYWORD",
    ) -> None:
        self.store = store
        self.executor = executor
        self.recorder = recorder
        self.timeout = timeout
        self.combine_timeout = combine_timeout
        self.related_keyword = related_keyword

    # --- Blocking operations ---

    def get_item(self, item_id: int) -> Optional[ItemRead]:
        return self.store.get(item_id)

    def list_items(self, category: Optional[str] = None, name: Optional[str] = None) -> List[ItemRead]:
        """Return items, optionally filtered by exact category and/or name."""
        if name is not None:
            items = self.store.find_by_name(name)
            if category is not None:
                items = [item for item in items if item.category == category]
            return items
        return self.store.list(category)

    def create_item(self, data: ItemCreate) -> ItemRead:
        return self.store.save(data)

    # --- Asynchronous operations ---

    async def _dispatch(
        self,
        operation: str,
        work: Callable[..., T],
        args: tuple,
        fallback: Callable[[BaseException], T],
        **context: Any,
    ) -> T:
        return await with_timeout(
            self.executor.submit(work, *args),
            self.timeout,
            fallback,
            operation=operation,
            recorder=self.recorder,
            **context,
        )

    async def get_item_async(self, item_id: int) -> Optional[ItemRead]:
        """Fetch an item; ``None`` when missing or on failure."""
        return await self._dispatch(
            "get_item", self.store.get, (item_id,), lambda reason: None, item_id=item_id
        )

    async def create_item_async(self, data: ItemCreate) -> Optional[ItemRead]:
        """Store a new item and return it with its generated id; ``None`` on failure."""
        return await self._dispatch(
            "create_item", self.store.save, (data,), lambda reason: None, name=data.name
        )

    async def update_item_async(self, item_id: int, data: ItemUpdate) -> Optional[ItemRead]:
        """Replace the name and category of an existing item.

        Returns ``None`` without writing anything if the item does not
        exist, and ``None`` on failure.
        """
        return await self._dispatch(
            "update_item", self._update, (item_id, data), lambda reason: None, item_id=item_id
        )

    async def delete_item_async(self, item_id: int) -> bool:
        """Delete an item; ``False`` when missing or on failure."""
        return await self._dispatch(
            "delete_item", self._delete, (item_id,), lambda reason: False, item_id=item_id
        )

    async def search_items_async(self, keyword: str) -> List[ItemRead]:
        """Items whose name or category contains ``keyword``, ignoring case."""
        return await self._dispatch(
            "search_items", self._search, (keyword,), lambda reason: [], keyword=keyword
        )

    async def get_combined_item_info(self, item_id: int, keyword: Optional[str] = None) -> str:
        """Describe an item together with the number of related items.

        The item lookup and the related item search run concurrently.
        """
        keyword = keyword or self.related_keyword
        return await combine(
            self.get_item_async(item_id),
            self.search_items_async(keyword),
            describe_item_info,
            self.combine_timeout,
            lambda reason: COMBINED_INFO_ERROR,
            operation="get_combined_item_info",
            recorder=self.recorder,
            item_id=item_id,
            keyword=keyword,
        )

    # --- Store work run on executor threads ---

    def _update(self, item_id: int, data: ItemUpdate) -> Optional[ItemRead]:
        existing = self.store.get(item_id)
        if existing is None:
            return None
        updated = existing.model_copy(update={"name": data.name, "category": data.category})
        return self.store.save(updated)

    def _delete(self, item_id: int) -> bool:
        if not self.store.exists_by_id(item_id):
            return False
        self.store.delete_by_id(item_id)
        return True

    def _search(self, keyword: str) -> List[ItemRead]:
        return [item for item in self.store.list() if matches_keyword(item, keyword)]
