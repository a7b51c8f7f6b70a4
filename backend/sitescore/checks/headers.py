from typing import Optional

import httpx

from sitescore.checks.base import SignalProvider
from sitescore.core.http import client_for
from sitescore.core.target import ScanTarget
from sitescore.models.schemas import HeaderName, HeaderSignal


class SecurityHeadersInspector(SignalProvider):
    """Which of the six tracked security headers the site sends.

    Any HTTP status counts as an answer; 4xx/5xx pages carry headers too.
    """

    key = "headers"
    sentinel = HeaderSignal()

    def __init__(self, timeout: float = 10.0, max_redirects: int = 5,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.transport = transport

    async def fetch(self, target: ScanTarget) -> HeaderSignal:
        async with client_for(timeout=self.timeout, max_redirects=self.max_redirects,
                              transport=self.transport) as client:
            r = await client.get(target.url, headers={"Accept": "text/html, */*"})
        # empty values count as absent
        return HeaderSignal.from_present(h for h in HeaderName if r.headers.get(h.value))
