"""Composite 0-100 website security score.

SSL grade is worth up to 40 points, security headers up to 40 and domain
reputation up to 20. Everything here is pure: same inputs, same score.
"""
import math
from typing import Dict

from sitescore.models.schemas import HeaderName

SSL_POINTS: Dict[str, int] = {"A+": 40, "A": 35, "A-": 30, "B": 25, "C": 15, "D": 10, "F": 5}
# Unrecognized grades, including "N/A", score above D and F.
SSL_DEFAULT_POINTS = 20

HEADER_POINTS = 40
TRACKED_HEADERS = len(HeaderName)

REPUTATION_POINTS: Dict[str, int] = {"Clean": 20, "Warning": 10, "Unknown": 0}


def ssl_points(grade: str) -> int:
    return SSL_POINTS.get(grade, SSL_DEFAULT_POINTS)


def header_points(present_count: int) -> float:
    if not 0 <= present_count <= TRACKED_HEADERS:
        raise ValueError(f"present_count must be within 0..{TRACKED_HEADERS}, got {present_count}")
    return (present_count / TRACKED_HEADERS) * HEADER_POINTS


def reputation_points(reputation: str) -> int:
    return REPUTATION_POINTS.get(reputation, 0)


def score(ssl_grade: str, headers_present: int, reputation: str) -> int:
    total = ssl_points(ssl_grade) + header_points(headers_present) + reputation_points(reputation)
    # half-up; round() would round .5 to even
    return int(math.floor(total + 0.5))
