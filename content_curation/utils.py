"""Utility functions for the Content Curation Engine."""

import hashlib
from datetime import UTC, datetime
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from .logging import get_logger

logger = get_logger(__name__)

# Query parameters that only carry tracking information
TRACKING_PARAMS = frozenset({'fbclid', 'gclid', 'ref', 'source', 'campaign'})
TRACKING_PREFIXES = ('utm_',)


def _is_tracking_param(name: str) -> bool:
    name = name.lower()
    return name in TRACKING_PARAMS or name.startswith(TRACKING_PREFIXES)


def normalize_url(url: str) -> str:
    """Normalize URL for comparison and hashing.

    Tracking parameters are dropped, the result is lowercased, a leading
    ``www.`` is removed from the host and trailing slashes are stripped.
    Strings that do not parse as absolute URLs are only trimmed and
    lowercased, so this never raises.

    Args:
        url: Raw URL string

    Returns:
        Normalized URL
    """
    if not url:
        return ""

    raw = url.strip()
    try:
        parsed = urlparse(raw)
        if not parsed.scheme or not parsed.netloc:
            return raw.lower()

        netloc = parsed.netloc.lower()
        while netloc.startswith('www.'):
            netloc = netloc[4:]

        query = parsed.query
        if query:
            params = [
                (key, value)
                for key, value in parse_qsl(query, keep_blank_values=True)
                if not _is_tracking_param(key)
            ]
            query = urlencode(params)

        # Trailing slashes come off the component that ends the URL; one left
        # empty is dropped by urlunparse, so no bare "?" or "#" remains
        tail = [parsed.path, parsed.params, query, parsed.fragment]
        for index in reversed(range(len(tail))):
            tail[index] = tail[index].rstrip('/')
            if tail[index]:
                break

        normalized = urlunparse((parsed.scheme, netloc, *tail))
    except ValueError:
        return raw.lower()

    return normalized.lower()


def extract_domain(url: str) -> str:
    """Extract host name from URL, without ``www.`` and port.

    Args:
        url: URL string

    Returns:
        Domain name, or an empty string when the URL has no host
    """
    try:
        domain = urlparse(url.strip()).hostname or ""
    except ValueError:
        return ""

    if domain.startswith('www.'):
        domain = domain[4:]
    return domain


def generate_content_hash(content: str) -> str:
    """Generate SHA-256 hash of content.

    Args:
        content: Content to hash

    Returns:
        Hexadecimal hash string
    """
    return hashlib.sha256(content.encode('utf-8')).hexdigest()


def parse_date_string(date_str: str) -> datetime | None:
    """Parse various date string formats.

    Args:
        date_str: Date string to parse

    Returns:
        Parsed timezone-aware datetime or None if parsing fails
    """
    if not date_str:
        return None

    date_str = date_str.strip()

    # ISO 8601, including the trailing "Z" produced by most feeds
    try:
        parsed = datetime.fromisoformat(date_str.replace('Z', '+00:00'))
        return ensure_aware(parsed)
    except ValueError:
        pass

    # RFC 2822 (common in RSS feeds)
    # Example: "Thu, 17 Jul 2025 23:17:14 GMT"
    try:
        from email.utils import parsedate_to_datetime
        return ensure_aware(parsedate_to_datetime(date_str))
    except (ValueError, TypeError):
        pass

    formats = [
        "%Y-%m-%d %H:%M:%S",
        "%d/%m/%Y",
        "%m/%d/%Y",
        "%B %d, %Y",
        "%b %d, %Y",
        "%d %B %Y",
        "%d %b %Y",
    ]

    for fmt in formats:
        try:
            return ensure_aware(datetime.strptime(date_str, fmt))
        except ValueError:
            continue

    logger.warning("Failed to parse date string", date_string=date_str)
    return None


def ensure_aware(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def format_datetime_iso(dt: datetime) -> str:
    """Format datetime as ISO string.

    Args:
        dt: Datetime to format

    Returns:
        ISO formatted datetime string
    """
    return ensure_aware(dt).isoformat()


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    """Clamp value into [lower, upper]."""
    return max(lower, min(upper, value))
