from __future__ import annotations

from typing import Iterable

from landing_monitor.models import CheckRecord, PageStatus


DEFAULT_HISTORY_LIMIT = 100


class StatusStore:
    """Latest known status per page id; one entry per registered page."""

    def __init__(self, page_ids: Iterable[str]):
        self._entries: dict[str, PageStatus] = {}
        self.reset(page_ids)

    def reset(self, page_ids: Iterable[str]) -> None:
        self._entries = {page_id: PageStatus.pending() for page_id in page_ids}

    def get(self, page_id: str) -> PageStatus | None:
        return self._entries.get(page_id)

    def set(self, page_id: str, status: PageStatus) -> None:
        if page_id not in self._entries:
            raise KeyError(page_id)
        self._entries[page_id] = status

    def snapshot(self) -> dict[str, PageStatus]:
        return dict(self._entries)

    def __contains__(self, page_id: object) -> bool:
        return page_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class HistoryStore:
    """
    Bounded newest-first log of check records per page id.

    Each append builds a new list and swaps it in, so readers holding an
    earlier snapshot never see a partially updated list.
    """

    def __init__(self, page_ids: Iterable[str], *, limit: int = DEFAULT_HISTORY_LIMIT):
        if int(limit) < 1:
            raise ValueError("history limit must be >= 1")
        self.limit = int(limit)
        self._entries: dict[str, list[CheckRecord]] = {}
        self.reset(page_ids)

    def reset(self, page_ids: Iterable[str]) -> None:
        self._entries = {page_id: [] for page_id in page_ids}

    def record(self, page_id: str, entry: CheckRecord) -> None:
        if page_id not in self._entries:
            raise KeyError(page_id)
        self._entries[page_id] = [entry, *self._entries[page_id]][: self.limit]

    def get(self, page_id: str) -> list[CheckRecord]:
        return list(self._entries.get(page_id) or [])

    def snapshot(self) -> dict[str, list[CheckRecord]]:
        return {page_id: list(items) for page_id, items in self._entries.items()}

    def __contains__(self, page_id: object) -> bool:
        return page_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
