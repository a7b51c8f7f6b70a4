import re
from typing import Optional

import httpx

from sitescore.checks.base import SignalProvider
from sitescore.core.http import client_for
from sitescore.core.target import ScanTarget
from sitescore.models.schemas import REPUTATION_UNAVAILABLE, Reputation

SAFE_BROWSING_API = "https://safebrowsing.googleapis.com/v4"

IPV4_HOST = re.compile(r"^\d{1,3}(\.\d{1,3}){3}$")
FREE_TLDS = ("tk", "ml", "ga", "cf", "gq")
URL_SHORTENERS = ("bit.ly", "tinyurl", "goo.gl")

THREAT_TYPES = [
    "MALWARE",
    "SOCIAL_ENGINEERING",
    "UNWANTED_SOFTWARE",
    "POTENTIALLY_HARMFUL_APPLICATION",
]


def classify_host(host: str) -> Reputation:
    """Pattern-based guess: IP-literal hosts, free TLDs and URL shorteners are suspicious.

    Low confidence by construction. This is a last resort when no threat feed
    is configured, not a threat feed.
    """
    host = host.lower().rstrip(".")
    if IPV4_HOST.match(host):
        return "Warning"
    if host.rsplit(".", 1)[-1] in FREE_TLDS:
        return "Warning"
    if any(s in host for s in URL_SHORTENERS):
        return "Warning"
    return "Clean"


class HeuristicReputationChecker(SignalProvider):
    key = "reputation"
    sentinel = REPUTATION_UNAVAILABLE

    async def fetch(self, target: ScanTarget) -> Reputation:
        return classify_host(target.domain)


class SafeBrowsingReputationChecker(SignalProvider):
    """Google Safe Browsing v4 lookup; any threat match means Warning."""

    key = "reputation"
    sentinel = REPUTATION_UNAVAILABLE

    def __init__(self, api_key: str, api_url: str = SAFE_BROWSING_API, timeout: float = 5.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def fetch(self, target: ScanTarget) -> Reputation:
        body = {
            "client": {"clientId": "sitescore", "clientVersion": "0.1.0"},
            "threatInfo": {
                "threatTypes": THREAT_TYPES,
                "platformTypes": ["ANY_PLATFORM"],
                "threatEntryTypes": ["URL"],
                "threatEntries": [{"url": target.url}],
            },
        }
        async with client_for(timeout=self.timeout, transport=self.transport) as client:
            r = await client.post(f"{self.api_url}/threatMatches:find",
                                  params={"key": self.api_key}, json=body)
            r.raise_for_status()
            data = r.json()
        return "Warning" if data.get("matches") else "Clean"
