"""
Search Session

State owned by one search: the ordered capture channel the interception
observers write to and the completion detector reads, plus the list of
failed API requests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from .schema import CapturedResponse, FailedRequestRecord, utc_timestamp


class CaptureChannel:
    """
    Append-only, arrival-ordered channel of captured responses.

    Readers poll `len(channel)` and take snapshots; nothing is ever removed.
    """

    def __init__(self):
        self._items: list[CapturedResponse] = []

    def append(self, capture: CapturedResponse) -> int:
        """Append a capture; returns the new count."""
        self._items.append(capture)
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[CapturedResponse]:
        return iter(tuple(self._items))

    def __getitem__(self, index: int) -> CapturedResponse:
        return self._items[index]

    def snapshot(self) -> tuple[CapturedResponse, ...]:
        return tuple(self._items)

    @property
    def total_size(self) -> int:
        return sum(c.size for c in self._items)


@dataclass
class SearchSession:
    """Mutable state of a single searchByURL / form-interaction call."""

    url: str = ""
    captures: CaptureChannel = field(default_factory=CaptureChannel)
    failures: list[FailedRequestRecord] = field(default_factory=list)
    started_at: str = field(default_factory=utc_timestamp)

    def record_capture(self, capture: CapturedResponse) -> None:
        self.captures.append(capture)

    def record_failure(self, record: FailedRequestRecord) -> None:
        self.failures.append(record)

    @property
    def capture_count(self) -> int:
        return len(self.captures)

    def summary(self) -> dict:
        """Counts, URLs and failures of this session."""
        captures = self.captures.snapshot()
        return {
            "total_responses": len(captures),
            "total_data_size": self.captures.total_size,
            "response_urls": [c.url for c in captures],
            "timestamps": [c.timestamp for c in captures],
            "failed_requests": [f.to_dict() for f in self.failures],
            "failed_request_count": len(self.failures),
        }
