import asyncio
import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional

from sitescore.checks.base import SignalProvider
from sitescore.checks.breach import StaticBreachLookup
from sitescore.checks.headers import SecurityHeadersInspector
from sitescore.checks.reputation import HeuristicReputationChecker, SafeBrowsingReputationChecker
from sitescore.checks.ssl_grade import SSLLabsGrader
from sitescore.core.config import Settings
from sitescore.core.errors import PersistenceError, ScanError
from sitescore.core.scoring import score as composite_score
from sitescore.core.target import parse_target
from sitescore.models.schemas import (
    RecommendationContext,
    ScanReport,
    ScanStats,
    Signals,
)
from sitescore.recommendations.ai import AIRecommendationStrategy
from sitescore.recommendations.rules import DeterministicRecommendationStrategy
from sitescore.storage.reports import ScanReportStore

logger = logging.getLogger(__name__)


class ScanState(str, Enum):
    VALIDATING = "validating"
    SCANNING = "scanning"
    SCORING = "scoring"
    RECOMMENDING = "recommending"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScanOrchestrator:
    """Runs one website scan end to end.

    validating -> scanning -> scoring -> recommending -> persisting -> done.
    Only ScanValidationError and PersistenceError escape ``run_scan``; provider
    and AI failures degrade to sentinels and rule-based recommendations.
    """

    def __init__(
        self,
        ssl: SignalProvider,
        headers: SignalProvider,
        reputation: SignalProvider,
        breach: SignalProvider,
        store: ScanReportStore,
        ai: Optional[AIRecommendationStrategy] = None,
        rules: Optional[DeterministicRecommendationStrategy] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.ssl = ssl
        self.headers = headers
        self.reputation = reputation
        self.breach = breach
        self.store = store
        self.ai = ai
        self.rules = rules or DeterministicRecommendationStrategy()
        self.clock = clock

    async def run_scan(self, user_id: str, url: str) -> ScanReport:
        scan_id = str(uuid.uuid4())
        state = ScanState.VALIDATING

        def advance(new_state: ScanState) -> None:
            nonlocal state
            logger.debug("scan %s: %s -> %s", scan_id, state.value, new_state.value)
            state = new_state

        try:
            target = parse_target(url)
            logger.info("scan %s: analyzing %s for user %s", scan_id, target.domain, user_id)

            advance(ScanState.SCANNING)
            ssl, headers, reputation, breach = await asyncio.gather(
                self.ssl.run(target),
                self.headers.run(target),
                self.reputation.run(target),
                self.breach.run(target),
            )
            signals = Signals(
                ssl_grade=ssl.value,
                headers=headers.value,
                reputation=reputation.value,
                breach_status=breach.value,
                unavailable={o.signal: o.error or "unavailable"
                             for o in (ssl, headers, reputation, breach) if not o.available},
            )

            advance(ScanState.SCORING)
            score = composite_score(signals.ssl_grade, len(signals.headers.present), signals.reputation)

            advance(ScanState.RECOMMENDING)
            context = RecommendationContext(
                domain=target.domain,
                score=score,
                ssl_grade=signals.ssl_grade,
                reputation=signals.reputation,
                missing_headers=signals.headers.missing,
            )
            recommendations = await self.ai.generate(context) if self.ai else None
            method = "ai"
            if not recommendations:
                if self.ai:
                    logger.warning("scan %s: AI recommendations failed, using rule-based ones", scan_id)
                recommendations = self.rules.generate(context)
                method = "hardcoded"

            report = ScanReport(
                id=scan_id,
                domain=target.domain,
                url=target.url,
                signals=signals,
                score=score,
                recommendations=recommendations,
                recommendation_method=method,
                timestamp=self.clock(),
            )

            advance(ScanState.PERSISTING)
            try:
                await self.store.insert_scan_report(user_id, report)
            except Exception as e:
                logger.error("scan %s: could not save report: %r", scan_id, e)
                raise PersistenceError("Failed to save scan report") from e

            advance(ScanState.DONE)
            logger.info("scan %s: complete, score=%d, %d recommendations (%s)",
                        scan_id, score, len(recommendations), method)
            return report
        except ScanError as e:
            logger.info("scan %s: failed while %s: %s", scan_id, state.value, e)
            advance(ScanState.FAILED)
            raise

    async def history(self, user_id: str, limit: int = 10) -> List[ScanReport]:
        return await self.store.find_scan_reports(user_id, limit)

    async def stats(self, user_id: str) -> ScanStats:
        return await self.store.aggregate_stats(user_id)


def build_orchestrator(settings: Settings, store: ScanReportStore) -> ScanOrchestrator:
    if settings.safe_browsing_api_key:
        reputation = SafeBrowsingReputationChecker(
            settings.safe_browsing_api_key, timeout=settings.safe_browsing_timeout
        )
    else:
        reputation = HeuristicReputationChecker()
    return ScanOrchestrator(
        ssl=SSLLabsGrader(settings.ssl_labs_url, timeout=settings.ssl_timeout),
        headers=SecurityHeadersInspector(timeout=settings.headers_timeout,
                                         max_redirects=settings.max_redirects),
        reputation=reputation,
        breach=StaticBreachLookup(),
        store=store,
        ai=AIRecommendationStrategy.from_settings(settings),
    )
