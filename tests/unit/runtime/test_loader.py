"""Tests for the dynamic component loader."""

from __future__ import annotations

import pytest

from chunk_batch_framework.adapters.memory import IterableSource, ListSink
from chunk_batch_framework.core.config.step import ComponentRef
from chunk_batch_framework.core.item.base import ItemProcessor, RecordSink, RecordSource
from chunk_batch_framework.examples.people import PeopleProcessor
from chunk_batch_framework.runtime.exceptions import ComponentInstantiationError
from chunk_batch_framework.runtime.loader import instantiate, load_class, validate_class

# ── load_class ───────────────────────────────────────────────────────


class TestLoadClass:
    def test_loads_subclass(self) -> None:
        cls = load_class("chunk_batch_framework.adapters.memory.ListSink", RecordSink)
        assert cls is ListSink

    @pytest.mark.parametrize("path", ["ListSink", ".ListSink", "chunk_batch_framework."])
    def test_malformed_path(self, path: str) -> None:
        with pytest.raises(ComponentInstantiationError, match="Invalid class path format"):
            load_class(path, RecordSink)

    def test_missing_module(self) -> None:
        with pytest.raises(ComponentInstantiationError) as exc_info:
            load_class("no_such_module.Sink", RecordSink)
        assert isinstance(exc_info.value.cause, ImportError)
        assert exc_info.value.class_path == "no_such_module.Sink"

    def test_missing_attribute(self) -> None:
        with pytest.raises(ComponentInstantiationError) as exc_info:
            load_class("chunk_batch_framework.adapters.memory.Nope", RecordSink)
        assert isinstance(exc_info.value.cause, AttributeError)

    def test_not_a_class(self) -> None:
        with pytest.raises(ComponentInstantiationError, match="is not a class"):
            load_class("chunk_batch_framework.runtime.loader.logger", RecordSink)

    def test_wrong_base(self) -> None:
        with pytest.raises(ComponentInstantiationError, match="is not a RecordSource subclass"):
            load_class("chunk_batch_framework.adapters.memory.ListSink", RecordSource)


# ── instantiate ──────────────────────────────────────────────────────


class TestInstantiate:
    def test_constructor_with_settings(self) -> None:
        source = instantiate(
            ComponentRef("chunk_batch_framework.adapters.memory.IterableSource", {"items": [1, 2]}),
            RecordSource,
        )
        assert isinstance(source, IterableSource)
        assert source.read() == 1

    def test_from_config_is_preferred(self) -> None:
        processor = instantiate(
            ComponentRef("chunk_batch_framework.examples.people.PeopleProcessor", {"match_code": "09"}),
            ItemProcessor,
        )
        assert isinstance(processor, PeopleProcessor)

    def test_bad_settings(self) -> None:
        ref = ComponentRef("chunk_batch_framework.adapters.memory.ListSink", {"bogus": 1})
        with pytest.raises(ComponentInstantiationError) as exc_info:
            instantiate(ref, RecordSink)
        assert isinstance(exc_info.value.cause, TypeError)

    def test_config_is_not_mutated(self) -> None:
        settings = {"match_code": "09"}
        instantiate(ComponentRef("chunk_batch_framework.examples.people.PeopleProcessor", settings), ItemProcessor)
        assert settings == {"match_code": "09"}


# ── validate_class ───────────────────────────────────────────────────


class TestValidateClass:
    def test_concrete_class_has_no_warnings(self) -> None:
        assert validate_class("chunk_batch_framework.adapters.memory.ListSink", RecordSink) == []

    def test_abstract_class_warns(self) -> None:
        warnings = validate_class("chunk_batch_framework.core.item.base.RecordSink", RecordSink)
        assert len(warnings) == 1
        assert "unimplemented abstract methods: write" in warnings[0]

    def test_unloadable_class_raises(self) -> None:
        with pytest.raises(ComponentInstantiationError):
            validate_class("no.such.Class", RecordSink)
