"""Tests for the enricher — redaction of already-destructured events."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from dataclasses import dataclass
from typing import Annotated

from field_redactor import (
    Destructurer,
    LogEvent,
    LogEventProperty,
    Redacted,
    RedactedValue,
    RedactorEnricher,
    ScalarValue,
    SequenceValue,
    SensitivityRegistry,
    StructureValue,
    TypeCatalog,
)
from field_redactor.types import structure


@dataclass
class EnrichRecord:
    sensitive_data: Annotated[str | None, Redacted]
    non_sensitive_data: str | None


@dataclass
class EnrichNesting:
    nested_record: EnrichRecord
    record_collection: list[EnrichRecord]


@dataclass
class EnrichHolder:
    label: str
    secret_child: Annotated[EnrichRecord | None, Redacted] = None


@dataclass
class EnrichMailbox:
    owner: str
    emails: Annotated[list[str], Redacted]


def _enricher(redacted_text=None):
    catalog = TypeCatalog(scan_modules=False)
    for cls in (EnrichRecord, EnrichNesting, EnrichHolder, EnrichMailbox):
        catalog.register(cls)
    return RedactorEnricher(redacted_text, registry=SensitivityRegistry(), catalog=catalog)


def _event(**values):
    # No policies: the tree is built without any knowledge of sensitivity
    destructurer = Destructurer()
    return LogEvent("test", [
        LogEventProperty(name, destructurer.create_property_value(value))
        for name, value in values.items()
    ])


# ── Structures ───────────────────────────────────────────────────────

def test_redacts_marked_field():
    event = _event(record=EnrichRecord("SecretValue", "PublicValue"))
    _enricher().enrich(event)
    record = event.properties["record"]
    assert record.type_tag == "EnrichRecord"
    assert record.get("sensitive_data") == ScalarValue("[REDACTED]")
    assert record.get("non_sensitive_data") == ScalarValue("PublicValue")


def test_null_sensitive_field_stays_null():
    event = _event(record=EnrichRecord(None, "PublicValue"))
    _enricher().enrich(event)
    assert event.properties["record"].get("sensitive_data") == ScalarValue(None)


def test_custom_redacted_text():
    event = _event(record=EnrichRecord("SecretValue", "PublicValue"))
    _enricher("❌❌❌").enrich(event)
    assert event.properties["record"].get("sensitive_data") == ScalarValue("❌❌❌")


def test_nested_and_collection_records_are_redacted():
    event = _event(nested=EnrichNesting(
        nested_record=EnrichRecord("NestedSecret", "Nested"),
        record_collection=[
            EnrichRecord("CollectionSecret1", "Collection1"),
            EnrichRecord("CollectionSecret2", "Collection2"),
        ],
    ))
    _enricher().enrich(event)

    nested = event.properties["nested"]
    assert nested.get("nested_record").get("sensitive_data") == ScalarValue("[REDACTED]")
    collection = nested.get("record_collection")
    assert len(collection) == 2
    for element, public in zip(collection, ["Collection1", "Collection2"]):
        assert element.get("sensitive_data") == ScalarValue("[REDACTED]")
        assert element.get("non_sensitive_data") == ScalarValue(public)


def test_sensitive_field_holding_unknown_structure_is_replaced():
    node = structure("EnrichHolder", [
        ("label", ScalarValue("x")),
        ("secret_child", structure("SomethingUnregistered", [("a", ScalarValue(1))])),
    ])
    event = LogEvent("test", [LogEventProperty("holder", node)])
    _enricher().enrich(event)
    assert event.properties["holder"].get("secret_child") == ScalarValue("[REDACTED]")


def test_unresolved_type_tag_is_left_alone():
    node = structure("NoSuchType", [("sensitive_data", ScalarValue("SecretValue"))])
    event = LogEvent("test", [LogEventProperty("x", node)])
    _enricher().enrich(event)
    assert event.properties["x"] is node


def test_untagged_structures_are_walked():
    event = _event(payload={"record": EnrichRecord("s", "p"), "n": 1})
    _enricher().enrich(event)
    payload = event.properties["payload"]
    assert payload.get("record").get("sensitive_data") == ScalarValue("[REDACTED]")
    assert payload.get("n") == ScalarValue(1)


def test_unchanged_trees_keep_identity():
    node = structure("EnrichRecord", [("sensitive_data", ScalarValue(None)), ("non_sensitive_data", ScalarValue("p"))])
    assert _enricher().redact(node) is node


# ── Sequences and scalars ────────────────────────────────────────────

def test_top_level_sequence_of_records():
    event = _event(records=[EnrichRecord("a", "b"), EnrichRecord(None, "c")])
    _enricher().enrich(event)
    records = event.properties["records"]
    assert isinstance(records, SequenceValue)
    assert records.elements[0].get("sensitive_data") == ScalarValue("[REDACTED]")
    assert records.elements[1].get("sensitive_data") == ScalarValue(None)


def test_scalar_of_sensitive_type_is_replaced():
    record = EnrichRecord("SecretValue", "PublicValue")
    event = LogEvent("test", [LogEventProperty("record", ScalarValue(record))])
    _enricher().enrich(event)
    assert event.properties["record"] == ScalarValue("[REDACTED]")


def test_scalar_redacted_value():
    event = LogEvent("test", [
        LogEventProperty("pin", ScalarValue(RedactedValue(123456))),
        LogEventProperty("missing", ScalarValue(RedactedValue(None))),
        LogEventProperty("plain", ScalarValue("hello")),
    ])
    _enricher().enrich(event)
    assert event.properties["pin"] == ScalarValue("[REDACTED]")
    assert event.properties["missing"] == ScalarValue(None)
    assert event.properties["plain"] == ScalarValue("hello")


def test_sensitive_collection_field_is_walked_not_replaced():
    # Elements are handled one by one; only the pre-destructuring policy
    # replaces the collection as a whole
    event = _event(mailbox=EnrichMailbox("john", ["a@example.com", "b@example.com"]))
    _enricher().enrich(event)
    emails = event.properties["mailbox"].get("emails")
    assert emails == SequenceValue((ScalarValue("a@example.com"), ScalarValue("b@example.com")))


# ── Properties ───────────────────────────────────────────────────────

def test_enrich_is_idempotent():
    event = _event(
        nested=EnrichNesting(EnrichRecord("s", "p"), [EnrichRecord("s1", "p1")]),
        pin=RedactedValue("1234"),
        record=EnrichRecord(None, "p"),
    )
    event.add_or_update_property(LogEventProperty("raw", ScalarValue(EnrichRecord("s", "p"))))
    enricher = _enricher()

    enricher.enrich(event)
    once = dict(event.properties)
    enricher.enrich(event)
    assert dict(event.properties) == once


def test_shape_is_preserved():
    record = EnrichNesting(EnrichRecord("s", "p"), [EnrichRecord("s1", "p1"), EnrichRecord("s2", "p2")])
    event = _event(nested=record)
    before = event.properties["nested"]
    _enricher().enrich(event)
    after = event.properties["nested"]

    assert after.names == before.names
    assert after.get("nested_record").names == before.get("nested_record").names
    assert len(after.get("record_collection")) == len(before.get("record_collection"))


def test_property_order_is_preserved():
    event = _event(first=1, record=EnrichRecord("s", "p"), last="z")
    _enricher().enrich(event)
    assert list(event.properties) == ["first", "record", "last"]


def test_default_catalog_finds_types_by_module_scan():
    # Fresh registry, default catalog: resolution falls back to scanning sys.modules
    enricher = RedactorEnricher(registry=SensitivityRegistry())
    node = StructureValue(
        (LogEventProperty("sensitive_data", ScalarValue("s")), LogEventProperty("non_sensitive_data", ScalarValue("p"))),
        f"{__name__}.EnrichRecord",
    )
    assert enricher.redact(node).get("sensitive_data") == ScalarValue("[REDACTED]")
