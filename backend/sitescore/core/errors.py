class ScanError(Exception):
    """Base class for failures surfaced to callers of a scan."""


class ScanValidationError(ScanError):
    """The submitted URL could not be parsed; nothing was scanned."""


class PersistenceError(ScanError):
    """The report was computed but could not be stored."""


class ProviderUnavailable(Exception):
    """Raised inside a signal provider when the upstream answer is unusable.

    Never escapes SignalProvider.run(); it becomes the provider's sentinel.
    """
