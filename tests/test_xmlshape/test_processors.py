"""Tests for the processor library and processor chains."""

import pytest

from xmlshape import processors
from xmlshape.processors import ProcessorChain, apply_processors
from xmlshape.shared.errors import ErrorKind, ProcessorError


class TestNameProcessors:
    """Test tag and attribute name processors."""

    def test_normalize_lowercases(self):
        assert processors.normalize("RandomlyCasedWord") == "randomlycasedword"

    def test_first_char_lower_case(self):
        assert processors.first_char_lower_case("RandomlyCasedWord") == "randomlyCasedWord"
        assert processors.first_char_lower_case("") == ""

    @pytest.mark.parametrize("name,expected", [
        ("prefix:localName", "localName"),
        ("localName", "localName"),
        ("a:b:c", "c"),
        ("xmlns:prefix", "xmlns:prefix"),
        ("xmlns", "xmlns"),
    ])
    def test_strip_prefix(self, name, expected):
        assert processors.strip_prefix(name) == expected


class TestValueProcessors:
    """Test value processors."""

    @pytest.mark.parametrize("text,expected", [
        ("0", 0),
        ("123", 123),
        ("-7", -7),
        ("15.56", 15.56),
        ("10.00", 10),
        ("1e3", 1000),
    ])
    def test_parse_numbers_converts(self, text, expected):
        result = processors.parse_numbers(text)
        assert result == expected
        assert type(result) is type(expected)

    @pytest.mark.parametrize("text", ["abc", "", "1_000", "nan", "inf", "12abc"])
    def test_parse_numbers_leaves_non_numbers(self, text):
        assert processors.parse_numbers(text) == text

    def test_parse_numbers_passes_non_strings(self):
        marker = object()
        assert processors.parse_numbers(marker) is marker

    @pytest.mark.parametrize("text,expected", [
        ("true", True),
        ("True", True),
        ("FALSE", False),
        ("false", False),
    ])
    def test_parse_booleans_converts(self, text, expected):
        assert processors.parse_booleans(text) is expected

    @pytest.mark.parametrize("text", ["yes", "truest", " true", "0"])
    def test_parse_booleans_leaves_other_text(self, text):
        assert processors.parse_booleans(text) == text


class TestProcessorChain:
    """Test composition and failure reporting of processor chains."""

    def test_empty_chain_is_identity_and_falsy(self):
        chain = ProcessorChain()
        assert not chain
        assert len(chain) == 0
        assert chain("Value") == "Value"

    def test_processors_apply_left_to_right(self):
        chain = ProcessorChain([processors.strip_prefix, processors.normalize], "tag name")
        assert chain("ns:ItemName") == "itemname"
        assert len(chain) == 2
        assert "strip_prefix" in repr(chain)

    def test_apply_processors_accepts_plain_sequences(self):
        assert apply_processors([processors.parse_numbers], "42") == 42

    def test_failing_processor_raises_processor_error(self):
        def explode(value):
            raise KeyError(value)

        chain = ProcessorChain([explode], "value")

        with pytest.raises(ProcessorError) as exc_info:
            chain("x")

        assert exc_info.value.kind is ErrorKind.PROCESSOR_FAILURE
        assert isinstance(exc_info.value.__cause__, KeyError)
        assert "explode" in str(exc_info.value)
