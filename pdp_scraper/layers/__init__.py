"""Layers package initialization."""
from pdp_scraper.layers.session import (
    SessionManager,
    RetryPolicy,
    SoftBlockSignature,
    SessionAcquisitionError,
    ContentNotReadyError,
    SoftBlockError,
)
from pdp_scraper.layers.extraction import FieldExtractor
from pdp_scraper.layers.variants import VariantWalker
from pdp_scraper.layers.orchestrator import TaskOrchestrator

__all__ = [
    "SessionManager",
    "RetryPolicy",
    "SoftBlockSignature",
    "SessionAcquisitionError",
    "ContentNotReadyError",
    "SoftBlockError",
    "FieldExtractor",
    "VariantWalker",
    "TaskOrchestrator",
]
