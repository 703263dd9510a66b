"""Tests package for Parallel Search.

HTTP calls to DataForSEO and Brave are mocked with respx; no test talks to a
real search API.

    pytest
"""
