import asyncio
import uuid
from typing import Dict, List, Protocol

from sitescore.models.schemas import ScanRecord, ScanReport, ScanStats


class ScanReportStore(Protocol):
    """Append-only scan report storage. Reports are never updated or deleted."""

    async def insert_scan_report(self, user_id: str, report: ScanReport) -> str: ...

    async def find_scan_reports(self, user_id: str, limit: int = 10) -> List[ScanReport]: ...

    async def aggregate_stats(self, user_id: str) -> ScanStats: ...


class InMemoryScanReportStore:
    """Process-local store, keyed by owning user and creation time."""

    def __init__(self):
        self._records: Dict[str, List[ScanRecord]] = {}
        self._lock = asyncio.Lock()

    async def insert_scan_report(self, user_id: str, report: ScanReport) -> str:
        record = ScanRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            report=report,
            created_at=report.timestamp,
        )
        async with self._lock:
            self._records.setdefault(user_id, []).append(record)
        return record.id

    async def find_scan_reports(self, user_id: str, limit: int = 10) -> List[ScanReport]:
        async with self._lock:
            records = list(self._records.get(user_id, []))
        records.sort(key=lambda r: r.created_at, reverse=True)
        return [r.report for r in records[:max(limit, 0)]]

    async def aggregate_stats(self, user_id: str) -> ScanStats:
        async with self._lock:
            reports = [r.report for r in self._records.get(user_id, [])]
        if not reports:
            return ScanStats()
        return ScanStats(
            total_scans=len(reports),
            average_score=round(sum(r.score for r in reports) / len(reports)),
            unique_domains=len({r.domain for r in reports}),
        )
