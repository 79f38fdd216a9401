"""In-memory endpoint store.

Each ingested dataset is kept as an "endpoint" that can be fetched back
by id. This stands in for the external storage collaborator; it keeps the
normalized dataset object so its shape tag survives the round trip.
"""

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from ingestion.models import NormalizedDataset
from utils import get_logger

logger = get_logger(__name__)


class EndpointNotFoundError(Exception):
    """Raised when no endpoint exists for an id."""

    pass


@dataclass(frozen=True)
class Endpoint:
    """A stored normalized dataset."""

    id: str
    prompt: str
    dataset: NormalizedDataset
    file_name: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "prompt": self.prompt,
            "file_name": self.file_name,
            "json_data": self.dataset.to_json(),
            "created_at": self.created_at.isoformat(),
        }


class EndpointStore:
    """Thread-safe in-memory endpoint store.

    Endpoints are immutable once created.
    """

    def __init__(self):
        self._endpoints: dict[str, Endpoint] = {}
        self._lock = threading.Lock()

    def create_endpoint(
        self,
        prompt: str,
        dataset: NormalizedDataset,
        file_name: Optional[str] = None,
    ) -> Endpoint:
        """Store a dataset under a fresh id.

        Args:
            prompt: Description of where the data came from
            dataset: Normalized dataset to store
            file_name: Original file name, if the data came from a file

        Returns:
            The created Endpoint
        """
        endpoint = Endpoint(
            id=str(uuid.uuid4()),
            prompt=prompt,
            dataset=dataset,
            file_name=file_name,
        )
        with self._lock:
            self._endpoints[endpoint.id] = endpoint
        logger.debug(f"Endpoint stored: {endpoint.id} ({dataset.kind.value})")
        return endpoint

    def get_endpoint(self, endpoint_id: str) -> Endpoint:
        """Fetch an endpoint by id.

        Raises:
            EndpointNotFoundError: If the id is unknown
        """
        with self._lock:
            endpoint = self._endpoints.get(endpoint_id)
        if endpoint is None:
            raise EndpointNotFoundError(f"Endpoint not found: {endpoint_id}")
        return endpoint

    def list_endpoints(self) -> list[Endpoint]:
        """All endpoints, oldest first."""
        with self._lock:
            return sorted(self._endpoints.values(), key=lambda e: e.created_at)

    def __len__(self) -> int:
        with self._lock:
            return len(self._endpoints)
