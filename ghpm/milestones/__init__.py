"""Batch milestone management across a fleet of GitHub repositories."""

from .orchestrator import BatchOrchestrator
from .runner import main

__all__ = ["BatchOrchestrator", "main"]
