import pandas as pd
import pytest

from ingestion.dispatcher import FormatDispatcher, decode_text, file_extension, ingest, load_json
from ingestion.errors import InvalidFormatError, UnsupportedFormatError
from ingestion.models import DatasetKind, RowsDataset, SheetsDataset, TreeDataset
from utils.constants import SUPPORTED_INPUT_FORMATS


@pytest.fixture
def dispatcher() -> FormatDispatcher:
    return FormatDispatcher()


def test_csv_becomes_typed_rows(dispatcher: FormatDispatcher, people_csv: bytes) -> None:
    dataset = dispatcher.dispatch("people.csv", people_csv)
    assert isinstance(dataset, RowsDataset)
    assert dataset.rows == [
        {"name": "Bob", "age": 30, "joined": "2024-01-05T00:00:00.000Z", "email": "bob@example.com"},
        {"name": "alice", "age": None, "joined": "2023-12-31T00:00:00.000Z", "email": "alice@example.com"},
        {"name": "Cy", "age": 8, "joined": None, "email": "cy@example.com"},
    ]


def test_csv_rows_share_one_key_set(dispatcher: FormatDispatcher) -> None:
    content = "A,B\n1\n2,x\n,\n3,4\n".encode()
    rows = dispatcher.dispatch("ragged.csv", content).rows
    assert len(rows) == 4
    assert all(set(row) == {"a", "b"} for row in rows)


def test_csv_with_too_many_fields_is_rejected(dispatcher: FormatDispatcher) -> None:
    with pytest.raises(InvalidFormatError) as exc_info:
        dispatcher.dispatch("bad.csv", b"a,b\n1,2,3\n4,5\n6,7,8\n")
    error = exc_info.value
    assert error.message == "CSV parsing errors"
    assert [d["code"] for d in error.details] == ["TooManyFields", "TooManyFields"]
    assert error.to_dict()["details"][0]["fields"] == ["1", "2", "3"]


def test_csv_round_trip_through_pandas(dispatcher: FormatDispatcher) -> None:
    rows = [
        {"city": "Oslo", "population": 709000, "note": "capital"},
        {"city": "Bergen", "population": 285900, "note": "west coast"},
    ]
    content = pd.DataFrame(rows).to_csv(index=False).encode()
    assert dispatcher.dispatch("cities.csv", content).rows == rows


def test_csv_with_byte_order_mark(dispatcher: FormatDispatcher) -> None:
    content = b"\xef\xbb\xbfId,Label\n1,one\n"
    assert dispatcher.dispatch("bom.csv", content).rows == [{"id": 1, "label": "one"}]


def test_empty_csv_is_an_empty_row_list(dispatcher: FormatDispatcher) -> None:
    dataset = dispatcher.dispatch("empty.csv", b"")
    assert isinstance(dataset, RowsDataset)
    assert dataset.rows == []


def test_multi_sheet_workbook_keeps_sheets(dispatcher: FormatDispatcher, two_sheet_workbook: bytes) -> None:
    dataset = dispatcher.dispatch("book.xlsx", two_sheet_workbook)
    assert isinstance(dataset, SheetsDataset)
    assert list(dataset.sheets) == ["sheet1", "sheet2"]
    assert dataset.sheets["sheet1"] == [{"name": "Bob", "score": 10}, {"name": "Ann", "score": None}]
    assert dataset.sheets["sheet2"] == [
        {"city": "Oslo", "founded": "2020-05-17T00:00:00.000Z"},
        {"city": "Rome", "founded": None},
    ]


def test_single_sheet_workbook_is_bare_rows(dispatcher: FormatDispatcher, one_sheet_workbook: bytes) -> None:
    dataset = dispatcher.dispatch("people.XLSX", one_sheet_workbook)
    assert isinstance(dataset, RowsDataset)
    assert dataset.rows == [{"name": "Bob", "score": 10}, {"name": "Ann", "score": 7.5}]


def test_json_array_of_objects_is_rows(dispatcher: FormatDispatcher) -> None:
    dataset = dispatcher.dispatch("data.json", b'[{"a": 1}, {"a": 2}]')
    assert dataset.kind is DatasetKind.ROWS
    assert dataset.to_json() == [{"a": 1}, {"a": 2}]


def test_json_object_is_tree(dispatcher: FormatDispatcher) -> None:
    dataset = dispatcher.dispatch("data.json", '{"a": {"b": [1, 2]}}')
    assert isinstance(dataset, TreeDataset)
    assert dataset.value == {"a": {"b": [1, 2]}}


def test_invalid_json_is_rejected(dispatcher: FormatDispatcher) -> None:
    with pytest.raises(InvalidFormatError):
        dispatcher.dispatch("data.json", b"{not json")


def test_xml_and_html_are_trees(dispatcher: FormatDispatcher) -> None:
    xml = dispatcher.dispatch("doc.xml", b"<root><item>1</item><item>2</item></root>")
    assert xml.to_json() == {"root": {"item": ["1", "2"]}}

    html = dispatcher.dispatch("page.htm", b"<ul><li>a</li></ul>")
    assert html.to_json() == {"lists": [["a"]]}


def test_invalid_xml_is_rejected(dispatcher: FormatDispatcher) -> None:
    with pytest.raises(InvalidFormatError):
        dispatcher.dispatch("doc.xml", b"<root><unclosed></root>")


@pytest.mark.parametrize(
    "content, expected",
    [
        (b'[{"a": 1}]', [{"a": 1}]),
        (b"<note><to>Ann</to></note>", {"note": {"to": "Ann"}}),
        (b"first line\n  second line  \n", {"content": ["first line", "second line"]}),
    ],
)
def test_text_file_fallback_chain(dispatcher: FormatDispatcher, content: bytes, expected) -> None:
    assert dispatcher.dispatch("notes.txt", content).to_json() == expected


@pytest.mark.parametrize("file_name", ["report.pdf", "README", "archive.tar.gz"])
def test_unsupported_extensions(dispatcher: FormatDispatcher, file_name: str) -> None:
    with pytest.raises(UnsupportedFormatError) as exc_info:
        dispatcher.dispatch(file_name, b"anything")
    assert exc_info.value.file_name == file_name


def test_custom_decoder_mapping() -> None:
    dispatcher = FormatDispatcher(decoders={"log": lambda content, encoding: TreeDataset(value=content.decode(encoding))})
    assert dispatcher.supported_extensions() == ["log"]
    assert dispatcher.dispatch("app.log", b"ok").value == "ok"
    with pytest.raises(UnsupportedFormatError):
        dispatcher.dispatch("data.json", b"{}")


def test_default_extensions(dispatcher: FormatDispatcher) -> None:
    assert dispatcher.supported_extensions() == sorted(SUPPORTED_INPUT_FORMATS)


def test_file_extension() -> None:
    assert file_extension("data.CSV") == "csv"
    assert file_extension("dir.v1/README") == ""
    assert file_extension(".json") == "json"
    assert file_extension("a.tar.gz") == "gz"


def test_decode_text_rejects_bad_bytes() -> None:
    with pytest.raises(InvalidFormatError):
        decode_text(b"\xff\xfe\xfa", "utf-8")
    assert decode_text("\ufeffhi") == "hi"


def test_module_level_ingest() -> None:
    assert ingest("x.csv", b"n\n1\n2\n").to_json() == [{"n": 1}, {"n": 2}]


def test_csv_with_unterminated_quote_is_rejected(dispatcher: FormatDispatcher) -> None:
    content = b'name,age\nBob,30\nAnn,"41\nCy,8\nDee,9\n'
    with pytest.raises(InvalidFormatError) as exc_info:
        dispatcher.dispatch("people.csv", content)
    assert exc_info.value.message == "CSV parsing errors"
    assert [d["code"] for d in exc_info.value.details] == ["MissingQuotes"]


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_json_rejects_non_standard_constants(dispatcher: FormatDispatcher, literal: str) -> None:
    with pytest.raises(InvalidFormatError):
        dispatcher.dispatch("data.json", f'[{{"a": {literal}}}]'.encode())


def test_text_file_with_non_standard_json_falls_back_to_lines(dispatcher: FormatDispatcher) -> None:
    dataset = dispatcher.dispatch("notes.txt", b'[{"a": NaN}]')
    assert dataset.to_json() == {"content": ['[{"a": NaN}]']}


def test_load_json_is_strict() -> None:
    assert load_json('{"a": 1.5}') == {"a": 1.5}
    with pytest.raises(ValueError):
        load_json("NaN")
