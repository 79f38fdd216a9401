"""Ingestion orchestrator.

This module defines the IngestionOrchestrator, the entry point that
surrounds the pipeline: it enforces the input size ceiling, runs the
format dispatcher, stores the result as an endpoint and serves stored
endpoints back with optional runtime filtering and sorting.
"""

from typing import Any, Optional

from config.schema import IngestSettings
from ingestion.dispatcher import FormatDispatcher, build_default_decoders
from ingestion.errors import IngestionError, InputTooLargeError
from ingestion.models import NormalizedDataset, RowsDataset
from query.evaluator import apply_query
from query.validator import parse_filter_spec, parse_sort_spec
from utils import get_logger

from .store import Endpoint, EndpointStore

logger = get_logger(__name__)


class IngestionOrchestrator:
    """Coordinates ingestion calls and endpoint retrieval.

    Every ingestion call is independent; the only state kept between calls
    is what the store holds.

    Args:
        settings: Runtime settings (defaults apply when omitted)
        store: Endpoint store (a fresh in-memory store when omitted)
        dispatcher: Format dispatcher (built from settings when omitted)
    """

    def __init__(
        self,
        settings: Optional[IngestSettings] = None,
        store: Optional[EndpointStore] = None,
        dispatcher: Optional[FormatDispatcher] = None,
    ):
        self.settings = settings or IngestSettings()
        self.store = store if store is not None else EndpointStore()
        self.dispatcher = dispatcher or FormatDispatcher(
            decoders=build_default_decoders(csv_delimiter=self.settings.csv_delimiter),
            encoding=self.settings.text_encoding,
        )

        logger.info("IngestionOrchestrator initialized")
        logger.debug(
            f"Settings: max_input_bytes={self.settings.max_input_bytes}, "
            f"encoding={self.settings.text_encoding}"
        )

    def check_size(self, content: bytes | str) -> None:
        """Reject input above the configured ceiling.

        Raises:
            InputTooLargeError: If the content is too large
        """
        size = len(content.encode(self.settings.text_encoding)) if isinstance(content, str) else len(content)
        if size > self.settings.max_input_bytes:
            raise InputTooLargeError(size, self.settings.max_input_bytes)

    def ingest(self, file_name: str, content: bytes | str) -> NormalizedDataset:
        """Decode one input without storing it.

        Raises:
            InputTooLargeError: If the content exceeds the size ceiling
            UnsupportedFormatError: If the extension is not supported
            InvalidFormatError: If the content does not parse
        """
        self.check_size(content)
        try:
            return self.dispatcher.dispatch(file_name, content)
        except IngestionError as e:
            logger.error(f"✗ Ingestion of '{file_name}' failed: {e.message}")
            raise

    def ingest_upload(self, file_name: str, content: bytes | str) -> Endpoint:
        """Decode one uploaded file and store it as an endpoint.

        Returns:
            The stored Endpoint
        """
        dataset = self.ingest(file_name, content)
        endpoint = self.store.create_endpoint(
            prompt=f"File upload: {file_name}",
            dataset=dataset,
            file_name=file_name,
        )
        logger.info(f"✓ Stored '{file_name}' as endpoint {endpoint.id}")
        return endpoint

    def fetch(
        self,
        endpoint_id: str,
        filter_spec: Any = None,
        sort_spec: Any = None,
    ) -> Any:
        """Return an endpoint's data, filtered and sorted when array-shaped.

        Args:
            endpoint_id: Id returned by ``ingest_upload``
            filter_spec: Filter as JSON text, dict, FilterSpec or None
            sort_spec: Sort as JSON text, dict, SortSpec or None

        Returns:
            JSON-shaped data

        Raises:
            EndpointNotFoundError: If the id is unknown
            QuerySpecError: If a specification is malformed
        """
        endpoint = self.store.get_endpoint(endpoint_id)
        parsed_filter = parse_filter_spec(filter_spec)
        parsed_sort = parse_sort_spec(sort_spec)

        dataset = endpoint.dataset
        if isinstance(dataset, RowsDataset):
            dataset = apply_query(dataset, parsed_filter, parsed_sort)
        elif parsed_filter is not None or parsed_sort is not None:
            logger.debug(f"Endpoint {endpoint_id} is {dataset.kind.value}-shaped; query ignored")

        return dataset.to_json()
