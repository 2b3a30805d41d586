from __future__ import annotations

import pytest

from skuaudit.domain.model import CodeTriple, canonical_code, clean_sku, signature


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("abc123", "ABC123"),
        ("  abc", ""),
        ("ab-12", "AB"),
        ("X9 trailing", "X9"),
        ("", ""),
        (None, ""),
        ("-leading", ""),
    ],
)
def test_clean_sku_keeps_leading_alphanumeric_run(raw: str | None, expected: str) -> None:
    assert clean_sku(raw) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, ""),
        ("3", "03"),
        (7, "07"),
        ("12", "12"),
        ("123", "123"),
        ("a1b", "01"),
        ("", "00"),
    ],
)
def test_canonical_code_pads_digits(value: object, expected: str) -> None:
    assert canonical_code(value) == expected


def test_signature_joins_components_with_pipes() -> None:
    assert signature("01", "02", "03") == "01|02|03"


def test_signature_renders_missing_components_as_empty() -> None:
    assert signature(None, None, None) == "||"
    assert signature("01", None, "") == "01||"


def test_signature_is_the_triple_key() -> None:
    triple = CodeTriple("04", "05", "06")

    assert signature("04", "05", "06") == triple.key == str(triple)


def test_code_triples_compare_structurally() -> None:
    assert CodeTriple.of("01", None, "03") == CodeTriple("01", "", "03")
    assert hash(CodeTriple.of(None, None, None)) == hash(CodeTriple())
    assert CodeTriple().is_unknown
    assert not CodeTriple("01").is_unknown


def test_canonical_triple_canonicalizes_each_component() -> None:
    assert CodeTriple.canonical("1", 2, None) == CodeTriple("01", "02", "")
