from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_section_config.adapters.values.coders import (
    DEFAULT_REGISTRY,
    BoolCoder,
    CoderRegistry,
    FloatCoder,
    IntCoder,
    SequenceCoder,
    StringCoder,
)
from lib_section_config.domain.errors import DecodingFailure


@given(st.integers())
def test_int_coder_round_trip(value: int) -> None:
    coder = IntCoder()
    assert coder.decode(coder.encode(value)) == value


@given(st.floats(allow_nan=False))
def test_float_coder_round_trip(value: float) -> None:
    coder = FloatCoder()
    assert coder.decode(coder.encode(value)) == value


@pytest.mark.parametrize(
    ("text", "expected"),
    [("true", True), ("ON", True), (" yes ", True), ("false", False), ("Off", False), ("no", False)],
)
def test_bool_coder_accepts_words(text: str, expected: bool) -> None:
    assert BoolCoder().decode(text) is expected


@pytest.mark.parametrize(
    ("coder", "text"),
    [(IntCoder(), "seven"), (IntCoder(), ""), (FloatCoder(), "1,5"), (BoolCoder(), "maybe")],
)
def test_scalar_decode_failures(coder, text: str) -> None:
    with pytest.raises(DecodingFailure):
        coder.decode(text)


def test_string_coder_is_identity() -> None:
    assert StringCoder().decode("  spaced  ") == "  spaced  "
    assert StringCoder().encode(12) == "12"


def test_sequence_of_sequences() -> None:
    coder = SequenceCoder(SequenceCoder(IntCoder()))
    assert coder.encode([[1, 2], [3]]) == "((1, 2), (3))"
    assert coder.decode("((1, 2), (3))") == [[1, 2], [3]]


def test_empty_sequence() -> None:
    coder = SequenceCoder(IntCoder())
    assert coder.encode([]) == "()"
    assert coder.decode("()") == []


@pytest.mark.parametrize("text", ["1, 2", "(1, 2", "((1, 2)", "(1, 2))", "(1, x)"])
def test_sequence_decode_failures(text: str) -> None:
    with pytest.raises(DecodingFailure):
        SequenceCoder(IntCoder()).decode(text)


def test_fixed_length_sequence() -> None:
    coder = SequenceCoder(FloatCoder(), length=4)
    with pytest.raises(DecodingFailure, match="Wrong number of elements"):
        coder.decode("(1, 2, 3)")


def test_default_registry_uses_exact_types() -> None:
    assert isinstance(DEFAULT_REGISTRY.coder_for(bool), BoolCoder)
    assert isinstance(DEFAULT_REGISTRY.coder_for(int), IntCoder)
    assert isinstance(DEFAULT_REGISTRY.coder_for_value(True), BoolCoder)
    assert isinstance(DEFAULT_REGISTRY.coder_for_value(2.0), FloatCoder)


def test_registry_passes_coder_instances_through() -> None:
    coder = SequenceCoder(IntCoder())
    assert CoderRegistry().coder_for(coder) is coder


def test_registry_unknown_type() -> None:
    with pytest.raises(LookupError, match="complex"):
        CoderRegistry().coder_for(complex)
