import json
import threading

import pytest

from config.schema import IngestSettings
from core import EndpointNotFoundError, EndpointStore, IngestionOrchestrator
from ingestion.errors import InputTooLargeError, InvalidFormatError, UnsupportedFormatError
from ingestion.models import RowsDataset, TreeDataset
from query.validator import QuerySpecError


@pytest.fixture
def orchestrator() -> IngestionOrchestrator:
    return IngestionOrchestrator()


def test_ingest_upload_stores_endpoint(orchestrator: IngestionOrchestrator, people_csv: bytes) -> None:
    endpoint = orchestrator.ingest_upload("people.csv", people_csv)

    assert endpoint.prompt == "File upload: people.csv"
    assert endpoint.file_name == "people.csv"
    assert isinstance(endpoint.dataset, RowsDataset)
    assert len(orchestrator.store) == 1
    assert orchestrator.store.get_endpoint(endpoint.id) is endpoint


def test_fetch_applies_filter_and_sort(orchestrator: IngestionOrchestrator, people_csv: bytes) -> None:
    endpoint = orchestrator.ingest_upload("people.csv", people_csv)

    data = orchestrator.fetch(
        endpoint.id,
        filter_spec='{"field": "age", "operator": "greaterThan", "value": "1"}',
        sort_spec={"field": "age", "direction": "asc"},
    )
    assert [row["name"] for row in data] == ["Cy", "Bob"]


def test_fetch_without_query_returns_everything(orchestrator: IngestionOrchestrator, people_csv: bytes) -> None:
    endpoint = orchestrator.ingest_upload("people.csv", people_csv)
    assert [row["name"] for row in orchestrator.fetch(endpoint.id)] == ["Bob", "alice", "Cy"]


def test_fetch_ignores_query_on_tree_data(orchestrator: IngestionOrchestrator) -> None:
    endpoint = orchestrator.ingest_upload("doc.xml", b"<a><b>1</b></a>")
    data = orchestrator.fetch(endpoint.id, filter_spec={"field": "b", "operator": "equals", "value": "2"})
    assert data == {"a": {"b": "1"}}


def test_fetch_rejects_bad_query(orchestrator: IngestionOrchestrator, people_csv: bytes) -> None:
    endpoint = orchestrator.ingest_upload("people.csv", people_csv)
    with pytest.raises(QuerySpecError):
        orchestrator.fetch(endpoint.id, sort_spec={"direction": "asc"})


def test_fetch_unknown_endpoint(orchestrator: IngestionOrchestrator) -> None:
    with pytest.raises(EndpointNotFoundError):
        orchestrator.fetch("does-not-exist")


def test_size_ceiling() -> None:
    orchestrator = IngestionOrchestrator(settings=IngestSettings(max_input_bytes=8))
    orchestrator.ingest("small.json", b"[1, 2]")

    with pytest.raises(InputTooLargeError) as exc_info:
        orchestrator.ingest("big.json", b"[1, 2, 3, 4, 5]")
    assert exc_info.value.size == 15
    assert exc_info.value.limit == 8
    assert len(orchestrator.store) == 0


def test_failed_ingestion_stores_nothing(orchestrator: IngestionOrchestrator) -> None:
    with pytest.raises(UnsupportedFormatError):
        orchestrator.ingest_upload("slides.pptx", b"...")
    with pytest.raises(InvalidFormatError):
        orchestrator.ingest_upload("data.json", b"{")
    assert len(orchestrator.store) == 0


def test_settings_reach_the_dispatcher() -> None:
    orchestrator = IngestionOrchestrator(settings=IngestSettings(csv_delimiter=";", text_encoding="latin-1"))
    dataset = orchestrator.ingest("data.csv", "Name;City\nJosé;Malmö\n".encode("latin-1"))
    assert dataset.to_json() == [{"name": "José", "city": "Malmö"}]


def test_shared_store_across_orchestrators(people_csv: bytes) -> None:
    store = EndpointStore()
    first = IngestionOrchestrator(store=store)
    second = IngestionOrchestrator(store=store)

    endpoint = first.ingest_upload("people.csv", people_csv)
    assert second.fetch(endpoint.id)[0]["name"] == "Bob"


def test_endpoint_to_dict_is_json_serializable(orchestrator: IngestionOrchestrator) -> None:
    endpoint = orchestrator.ingest_upload("note.txt", b"hello")
    payload = endpoint.to_dict()
    assert payload["json_data"] == {"content": ["hello"]}
    assert json.loads(json.dumps(payload))["id"] == endpoint.id


def test_store_lists_endpoints_oldest_first() -> None:
    store = EndpointStore()
    first = store.create_endpoint("one", TreeDataset(value=1))
    second = store.create_endpoint("two", TreeDataset(value=2))
    assert [e.id for e in store.list_endpoints()] == [first.id, second.id]


def test_store_is_safe_under_concurrent_writes() -> None:
    store = EndpointStore()

    def _create() -> None:
        for _ in range(50):
            store.create_endpoint("concurrent", TreeDataset(value=None))

    threads = [threading.Thread(target=_create) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(store) == 200
