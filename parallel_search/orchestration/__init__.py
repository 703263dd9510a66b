"""Orchestration of the two search sources."""

from .orchestrator import ParallelSearchOrchestrator

__all__ = ["ParallelSearchOrchestrator"]
