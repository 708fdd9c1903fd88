"""
In-memory state behind one dashboard table.

Holds the most recently completed record collection for a view and applies
the engine to it. A refresh replaces the collection wholesale only when the
loader succeeds; a failed refresh leaves the previous collection in place.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime

from crm_dashboard.infrastructure.observability.logging import get_logger

from .criteria import FilterCriteria, RecordView
from .derived import Record
from .engine import DEFAULT_DISPLAY_LIMIT, DisplayPage, paginate_for_display, visible_records

logger = get_logger(__name__)

RecordLoader = Callable[[], Awaitable[Sequence[Record]]]


class RecordViewState:
    """
    Record collection plus a single-flight refresh guard for one view.

    Concurrent refresh calls share the in-flight load instead of issuing a
    second upstream request.
    """

    def __init__(self, view: RecordView, loader: RecordLoader):
        self.view = view
        self._loader = loader
        self._records: tuple[Record, ...] = ()
        self._version = 0
        self._inflight: asyncio.Task | None = None
        self._memo_key: tuple | None = None
        self._memo_value: list[Record] = []
        self.last_error: str | None = None
        self.refreshed_at: datetime | None = None

    @property
    def records(self) -> tuple[Record, ...]:
        return self._records

    @property
    def loaded(self) -> bool:
        return self._version > 0

    @property
    def loading(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    async def refresh(self) -> tuple[Record, ...]:
        """Reload the collection, joining a refresh that is already running."""
        if self._inflight is not None and not self._inflight.done():
            logger.debug("Joining in-flight refresh", view=self.view.name)
            return await asyncio.shield(self._inflight)

        self._inflight = asyncio.ensure_future(self._load())
        return await asyncio.shield(self._inflight)

    async def ensure_loaded(self) -> tuple[Record, ...]:
        if not self.loaded:
            return await self.refresh()
        return self._records

    async def _load(self) -> tuple[Record, ...]:
        logger.info("Refreshing records", view=self.view.name)
        try:
            records = await self._loader()
        except Exception as e:
            self.last_error = str(e)
            logger.error("Record refresh failed", view=self.view.name, error=str(e))
            raise

        self._records = tuple(records)
        self._version += 1
        self.last_error = None
        self.refreshed_at = datetime.now(UTC)
        logger.info("Records refreshed", view=self.view.name, record_count=len(self._records))
        return self._records

    def visible(self, criteria: FilterCriteria, now: datetime) -> list[Record]:
        """Filtered and ordered records, memoized on (collection, criteria, now)."""
        key = (self._version, criteria, now)
        if key != self._memo_key:
            self._memo_value = visible_records(self._records, criteria, now, self.view)
            self._memo_key = key
        return self._memo_value

    def page(
        self, criteria: FilterCriteria, now: datetime, limit: int = DEFAULT_DISPLAY_LIMIT
    ) -> DisplayPage:
        return paginate_for_display(self.visible(criteria, now), len(self._records), limit)
