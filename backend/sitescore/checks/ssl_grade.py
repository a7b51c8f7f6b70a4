from typing import Optional

import httpx

from sitescore.checks.base import SignalProvider
from sitescore.core.errors import ProviderUnavailable
from sitescore.core.http import client_for
from sitescore.core.target import ScanTarget
from sitescore.models.schemas import SSL_UNAVAILABLE

SSL_LABS_API = "https://api.ssllabs.com/api/v3"


class SSLLabsGrader(SignalProvider):
    """SSL/TLS grade from the SSL Labs assessment API.

    Only cached, finished assessments are used (``fromCache=on``); anything
    still in progress counts as unavailable.
    """

    key = "ssl"
    sentinel = SSL_UNAVAILABLE

    def __init__(self, api_url: str = SSL_LABS_API, timeout: float = 30.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def fetch(self, target: ScanTarget) -> str:
        async with client_for(timeout=self.timeout, transport=self.transport) as client:
            r = await client.get(
                f"{self.api_url}/analyze",
                params={"host": target.domain, "publish": "off", "all": "done", "fromCache": "on"},
            )
            r.raise_for_status()
            data = r.json()

        status = data.get("status")
        endpoints = data.get("endpoints") or []
        if status != "READY" or not endpoints:
            raise ProviderUnavailable(f"SSL Labs assessment not ready (status={status})")
        grade = endpoints[0].get("grade")
        if grade is None or grade == "":
            return SSL_UNAVAILABLE
        if not isinstance(grade, str):
            raise ProviderUnavailable(f"SSL Labs returned a non-text grade: {grade!r}")
        return grade
