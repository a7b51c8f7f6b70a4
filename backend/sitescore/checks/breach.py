from sitescore.checks.base import SignalProvider
from sitescore.core.target import ScanTarget
from sitescore.models.schemas import BREACH_NOT_CONFIGURED, BREACH_UNAVAILABLE


class StaticBreachLookup(SignalProvider):
    """Default breach lookup when no breach-data service is wired in.

    Breach status is informational text only; it never affects the score.
    """

    key = "breach"
    sentinel = BREACH_UNAVAILABLE

    def __init__(self, message: str = BREACH_NOT_CONFIGURED):
        self.message = message

    async def fetch(self, target: ScanTarget) -> str:
        return self.message
