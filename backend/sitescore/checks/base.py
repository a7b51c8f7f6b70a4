import asyncio
import logging
from typing import Any, Optional

from sitescore.core.target import ScanTarget
from sitescore.models.schemas import SignalOutcome

logger = logging.getLogger(__name__)


class SignalProvider:
    """One external security signal behind a failure-proof ``run``.

    Subclasses implement ``fetch``, which may raise freely. ``run`` bounds it
    by ``timeout`` (None = no bound) and turns any error into ``sentinel``.
    """

    key = "signal"
    sentinel: Any = None
    timeout: Optional[float] = None

    async def fetch(self, target: ScanTarget) -> Any:
        raise NotImplementedError

    async def run(self, target: ScanTarget) -> SignalOutcome:
        try:
            if self.timeout is None:
                value = await self.fetch(target)
            else:
                value = await asyncio.wait_for(self.fetch(target), self.timeout)
        except Exception as e:
            logger.warning("%s check failed for %s: %r", self.key, target.domain, e)
            return SignalOutcome(signal=self.key, value=self.sentinel, available=False, error=repr(e))
        return SignalOutcome(signal=self.key, value=value)
