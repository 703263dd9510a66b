"""URL canonicalization used as the cross-source deduplication key.

Normalization is lossy but safe: two URLs that point at the same page modulo
tracking parameters and formatting map to the same key, and anything that
cannot be parsed is kept as-is instead of raising.
"""

import re
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from w3lib.url import canonicalize_url

from ..utils.logging import get_logger

logger = get_logger(__name__)

TRACKING_PARAMS = frozenset(
    {
        "srsltid",
        "gclid",
        "fbclid",
        "msclkid",
        "yclid",
        "gbraid",
        "wbraid",
    }
)
TRACKING_PREFIXES = ("utm_",)

DEFAULT_PORTS = {"http": 80, "https": 443}

# Percent-escapes keep their hex digits; everything else is literal text
_PATH_TOKEN = re.compile(r"%[0-9A-Fa-f]{2}|[^%]+|%")


@dataclass(frozen=True)
class CanonicalUrl:
    """A URL that was parsed and normalized."""

    value: str
    is_canonical = True


@dataclass(frozen=True)
class FallbackUrl:
    """A string that could not be parsed as a URL, kept trimmed."""

    value: str
    is_canonical = False


def is_tracking_param(key: str) -> bool:
    """Whether a query-string key only carries advertising/analytics ids."""
    k = key.lower()
    return k in TRACKING_PARAMS or k.startswith(TRACKING_PREFIXES)


def _strip_www(host: str) -> str:
    while host.startswith("www."):
        host = host[4:]
    return host


def _lower_path(path: str) -> str:
    return "".join(
        tok if tok.startswith("%") else tok.lower()
        for tok in _PATH_TOKEN.findall(path)
    )


def canonicalize(url: str) -> CanonicalUrl | FallbackUrl:
    """Normalize ``url`` into its canonical form.

    Drops the fragment and credentials, lower-cases the host and strips
    ``www.``, removes tracking parameters, sorts the remaining parameters by
    key then value, lower-cases the path and strips its trailing slashes, and
    removes default ports. Anything unparseable comes back as ``FallbackUrl``.
    """
    raw = url.strip() if isinstance(url, str) else ""

    try:
        parts = urlsplit(raw)
        scheme = parts.scheme.lower()
        host = parts.hostname
        if not scheme or not parts.netloc or not host:
            return FallbackUrl(raw)

        host = _strip_www(host.lower())
        if not host:
            return FallbackUrl(raw)

        port = parts.port
        netloc = f"[{host}]" if ":" in host else host
        if port is not None and DEFAULT_PORTS.get(scheme) != port:
            netloc = f"{netloc}:{port}"

        kept = [
            (k, v)
            for k, v in parse_qsl(parts.query, keep_blank_values=True)
            if not is_tracking_param(k)
        ]
        kept.sort()
        query = urlencode(kept)

        rebuilt = urlunsplit((scheme, netloc, parts.path, query, ""))
        canonical = urlsplit(canonicalize_url(rebuilt, keep_blank_values=True))
        path = _lower_path(canonical.path)
        if path != "/":
            path = path.rstrip("/") or "/"

        return CanonicalUrl(canonical._replace(path=path).geturl())
    except Exception as e:
        logger.debug(f"Could not canonicalize {raw!r}: {e}")
        return FallbackUrl(raw)


def normalize_url(url: str) -> str:
    """Return the deduplication key for ``url``; never raises."""
    return canonicalize(url).value


def domain_from_url(url: str) -> str:
    """Return the lower-cased host of ``url`` without ``www.``, or ``""``."""
    try:
        host = urlsplit(url.strip()).hostname
    except ValueError:
        return ""
    return _strip_www(host.lower()) if host else ""
