"""Result processing package for search results.

This package contains the fusion pipeline:
- normalization: Canonical URLs used as deduplication keys
- fusion: Merge results from both sources by canonical URL
- ordering: Assign final ranks under the source priority policy
- stats: Per-source counts, overlap and cost
"""

from .fusion import FusionResult, fuse
from .normalization import CanonicalUrl, FallbackUrl, canonicalize, normalize_url
from .ordering import order_records
from .stats import compute_stats

__all__ = [
    "CanonicalUrl",
    "FallbackUrl",
    "FusionResult",
    "canonicalize",
    "compute_stats",
    "fuse",
    "normalize_url",
    "order_records",
]
