from pydantic import BaseModel, ConfigDict, HttpUrl, TypeAdapter, ValidationError

from sitescore.core.errors import ScanValidationError

_URL = TypeAdapter(HttpUrl)


class ScanTarget(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str     # as submitted, minus surrounding whitespace
    domain: str  # lowercased hostname


def parse_target(url: str) -> ScanTarget:
    if not isinstance(url, str) or not url.strip():
        raise ScanValidationError("URL is required")
    candidate = url.strip()
    try:
        parsed = _URL.validate_python(candidate)
    except ValidationError as e:
        raise ScanValidationError(
            "Invalid URL format. Please include http:// or https://"
        ) from e
    if not parsed.host:
        raise ScanValidationError("URL has no hostname")
    return ScanTarget(url=candidate, domain=parsed.host)
