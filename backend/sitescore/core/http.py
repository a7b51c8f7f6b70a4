from contextlib import asynccontextmanager
from typing import Dict, Optional

import httpx

DEFAULT_UA = (
    "SiteScoreScanner/0.1 (+https://example.local; contact=security@example.local) "
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

HEADERS = {"User-Agent": DEFAULT_UA, "Accept": "*/*"}


@asynccontextmanager
async def client_for(
    timeout: float = 10.0,
    max_redirects: int = 5,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    headers: Optional[Dict[str, str]] = None,
):
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(timeout, connect=min(timeout, 5.0)),
        headers={**HEADERS, **(headers or {})},
        follow_redirects=True,
        max_redirects=max_redirects,
        http2=True,
        verify=True,
        transport=transport,
    ) as client:
        yield client
