"""
Tests for the scan orchestrator: fallback paths, failures and persistence.
"""

import asyncio
from datetime import datetime, timezone
from types import SimpleNamespace

import httpx
import pytest

from sitescore.checks.base import SignalProvider
from sitescore.core.config import Settings
from sitescore.core.engine import ScanOrchestrator, build_orchestrator
from sitescore.core.errors import PersistenceError, ScanValidationError
from sitescore.checks.reputation import HeuristicReputationChecker, SafeBrowsingReputationChecker
from sitescore.checks.ssl_grade import SSLLabsGrader
from sitescore.models.schemas import HeaderName, HeaderSignal, Recommendation
from sitescore.recommendations.ai import AIRecommendationStrategy
from sitescore.storage.reports import InMemoryScanReportStore

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class StubProvider(SignalProvider):
    def __init__(self, key, value, sentinel=None, exc=None):
        self.key = key
        self.value = value
        self.sentinel = sentinel
        self.exc = exc
        self.calls = 0

    async def fetch(self, target):
        self.calls += 1
        if self.exc:
            raise self.exc
        return self.value


class StubAI:
    name = "ai"

    def __init__(self, result):
        self.result = result
        self.contexts = []

    async def generate(self, context):
        self.contexts.append(context)
        return self.result


class BrokenStore(InMemoryScanReportStore):
    async def insert_scan_report(self, user_id, report):
        raise ConnectionError("database unreachable")


def _providers(ssl="A+", present=tuple(HeaderName), reputation="Clean"):
    return dict(
        ssl=StubProvider("ssl", ssl, sentinel="N/A"),
        headers=StubProvider("headers", HeaderSignal.from_present(present), sentinel=HeaderSignal()),
        reputation=StubProvider("reputation", reputation, sentinel="Unknown"),
        breach=StubProvider("breach", "No breach data available", sentinel="Unable to verify breach data"),
    )


def _orchestrator(providers, store=None, ai=None):
    return ScanOrchestrator(store=store or InMemoryScanReportStore(), ai=ai,
                            clock=lambda: FIXED_NOW, **providers)


class TestRunScan:

    def test_excellent_site_without_ai(self):
        store = InMemoryScanReportStore()
        report = asyncio.run(_orchestrator(_providers(), store).run_scan("user-1", "https://example.com"))

        assert report.domain == "example.com"
        assert report.url == "https://example.com"
        assert report.score == 100
        assert report.recommendation_method == "hardcoded"
        assert [r.title for r in report.recommendations] == ["Maintain Your Excellent Security"]
        assert report.timestamp == FIXED_NOW
        assert report.signals.unavailable == {}
        assert asyncio.run(store.find_scan_reports("user-1")) == [report]

    def test_worst_case_site(self):
        providers = _providers(ssl="N/A", present=(), reputation="Warning")
        report = asyncio.run(_orchestrator(providers).run_scan("u", "http://1.2.3.4/"))

        assert report.score == 30
        assert len(report.recommendations) == 9
        assert [r.priority for r in report.recommendations[:3]] == ["critical"] * 3

    def test_ai_recommendations_used_when_valid(self):
        rec = Recommendation(priority="medium", category="Overall Security", title="t",
                             description="d", action="a", impact="i")
        ai = StubAI([rec])
        report = asyncio.run(_orchestrator(_providers(ssl="B"), ai=ai).run_scan("u", "https://example.com"))

        assert report.recommendation_method == "ai"
        assert report.recommendations == [rec]
        context = ai.contexts[0]
        assert context.ssl_grade == "B"
        assert context.score == 85
        assert context.missing_headers == []

    def test_non_json_ai_reply_falls_back(self):
        completions = SimpleNamespace(create=None)

        async def create(**kwargs):
            msg = SimpleNamespace(content="Everything looks great, keep it up!")
            return SimpleNamespace(choices=[SimpleNamespace(message=msg)])

        completions.create = create
        client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
        ai = AIRecommendationStrategy(client, model="m")

        report = asyncio.run(_orchestrator(_providers(), ai=ai).run_scan("u", "https://example.com"))

        assert report.recommendation_method == "hardcoded"
        assert report.recommendations[0].title == "Maintain Your Excellent Security"

    def test_ai_returning_nothing_falls_back(self):
        report = asyncio.run(_orchestrator(_providers(), ai=StubAI(None)).run_scan("u", "https://example.com"))
        assert report.recommendation_method == "hardcoded"

    def test_provider_failures_degrade_to_sentinels(self):
        providers = _providers()
        providers["ssl"].exc = TimeoutError()
        providers["headers"].exc = ConnectionError("reset")
        providers["reputation"].exc = RuntimeError("feed down")
        providers["breach"].exc = RuntimeError("nope")

        report = asyncio.run(_orchestrator(providers).run_scan("u", "https://example.com"))

        signals = report.signals
        assert signals.ssl_grade == "N/A"
        assert signals.headers.missing == list(HeaderName)
        assert signals.reputation == "Unknown"
        assert signals.breach_status == "Unable to verify breach data"
        assert set(signals.unavailable) == {"ssl", "headers", "reputation", "breach"}
        # 20 (N/A) + 0 + 0
        assert report.score == 20

    def test_malformed_ssl_payload_still_completes(self):
        payload = {"status": "READY", "endpoints": [{"grade": 5}]}
        providers = _providers()
        providers["ssl"] = SSLLabsGrader(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payload))
        )

        report = asyncio.run(_orchestrator(providers).run_scan("u", "https://example.com"))

        assert report.signals.ssl_grade == "N/A"
        assert "ssl" in report.signals.unavailable
        # 20 (N/A) + 40 + 20
        assert report.score == 80

    def test_providers_run_concurrently(self):
        class Gate(SignalProvider):
            """Finishes only once every gated provider has started."""
            def __init__(self, key, value, started, total):
                self.key, self.value = key, value
                self.started, self.total = started, total
                self.timeout = 1.0

            async def fetch(self, target):
                self.started.append(self.key)
                while len(self.started) < self.total:
                    await asyncio.sleep(0.001)
                return self.value

        started = []
        providers = dict(
            ssl=Gate("ssl", "A", started, 4),
            headers=Gate("headers", HeaderSignal(), started, 4),
            reputation=Gate("reputation", "Clean", started, 4),
            breach=Gate("breach", "none", started, 4),
        )
        report = asyncio.run(_orchestrator(providers).run_scan("u", "https://example.com"))

        assert report.signals.unavailable == {}
        assert sorted(started) == ["breach", "headers", "reputation", "ssl"]

    @pytest.mark.parametrize("url", ["not a url", "", "   ", "ftp://example.com", "example.com", "https://"])
    def test_malformed_url_makes_no_calls(self, url):
        providers = _providers()
        ai = StubAI(None)
        store = InMemoryScanReportStore()

        with pytest.raises(ScanValidationError):
            asyncio.run(_orchestrator(providers, store, ai).run_scan("u", url))

        assert [p.calls for p in providers.values()] == [0, 0, 0, 0]
        assert ai.contexts == []
        assert asyncio.run(store.find_scan_reports("u")) == []

    def test_persistence_failure_fails_the_scan(self):
        with pytest.raises(PersistenceError):
            asyncio.run(_orchestrator(_providers(), BrokenStore()).run_scan("u", "https://example.com"))

    def test_history_and_stats(self):
        store = InMemoryScanReportStore()
        orchestrator = _orchestrator(_providers(), store)
        asyncio.run(orchestrator.run_scan("u", "https://example.com"))
        asyncio.run(orchestrator.run_scan("u", "https://example.com/about"))

        assert len(asyncio.run(orchestrator.history("u", 1))) == 1
        stats = asyncio.run(orchestrator.stats("u"))
        assert stats.total_scans == 2
        assert stats.average_score == 100
        assert stats.unique_domains == 1


class TestBuildOrchestrator:

    def test_defaults(self):
        orchestrator = build_orchestrator(Settings(), InMemoryScanReportStore())
        assert orchestrator.ai is None
        assert isinstance(orchestrator.reputation, HeuristicReputationChecker)
        assert orchestrator.ssl.timeout == 30.0
        assert orchestrator.headers.timeout == 10.0
        assert orchestrator.headers.max_redirects == 5

    def test_optional_capabilities(self):
        settings = Settings(ai_api_key="sk-test", safe_browsing_api_key="gsb")
        orchestrator = build_orchestrator(settings, InMemoryScanReportStore())
        assert isinstance(orchestrator.ai, AIRecommendationStrategy)
        assert isinstance(orchestrator.reputation, SafeBrowsingReputationChecker)
