"""Parallel Search: DataForSEO and Brave results fused into one ranked list."""

__version__ = "0.1.0"
