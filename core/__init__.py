"""Ingestion orchestration and endpoint storage."""

from .orchestrator import IngestionOrchestrator
from .store import Endpoint, EndpointNotFoundError, EndpointStore

__all__ = ["Endpoint", "EndpointNotFoundError", "EndpointStore", "IngestionOrchestrator"]
