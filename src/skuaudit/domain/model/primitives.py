"""Domain primitives: SKU and code canonicalization plus the proposal signature.

Codes are compared as canonical strings (digits only, zero-padded to two
characters). Callers canonicalize before building a ``CodeTriple``; the triple
itself only turns ``None`` into ``""``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

type Sku = str
type Code = str

SIGNATURE_DELIMITER: Final[str] = "|"

_SKU_PREFIX = re.compile(r"^[A-Za-z0-9]+")
_NON_DIGITS = re.compile(r"\D")


def clean_sku(raw: str | None) -> Sku:
    """Return the leading alphanumeric run of ``raw`` in upper case."""

    if not raw:
        return ""
    match = _SKU_PREFIX.match(raw)
    return match.group(0).upper() if match else ""


def canonical_code(value: object) -> Code:
    """Return ``value`` as a digits-only code left-padded to two characters.

    ``None`` maps to ``""``; anything else (including ``""``) is padded, so an
    empty string becomes ``"00"``. Longer codes are kept as they are.
    """

    if value is None:
        return ""
    digits = _NON_DIGITS.sub("", str(value))
    return digits.rjust(2, "0")


@dataclass(frozen=True, order=True, slots=True)
class CodeTriple:
    """A (category, type, classification) proposal with structural equality."""

    category: Code = ""
    type: Code = ""
    classification: Code = ""

    def __post_init__(self) -> None:
        # frozen: normalise falsy components through object.__setattr__
        for name in ("category", "type", "classification"):
            if not getattr(self, name):
                object.__setattr__(self, name, "")

    @classmethod
    def of(
        cls,
        category: Code | None,
        type_: Code | None,
        classification: Code | None,
    ) -> CodeTriple:
        return cls(category or "", type_ or "", classification or "")

    @classmethod
    def canonical(cls, category: object, type_: object, classification: object) -> CodeTriple:
        return cls(canonical_code(category), canonical_code(type_), canonical_code(classification))

    @property
    def key(self) -> str:
        return SIGNATURE_DELIMITER.join((self.category, self.type, self.classification))

    @property
    def is_unknown(self) -> bool:
        return not (self.category or self.type or self.classification)

    def __str__(self) -> str:
        return self.key


def signature(category: Code | None, type_: Code | None, classification: Code | None) -> str:
    """Return the canonical grouping key for a proposal."""

    return CodeTriple.of(category, type_, classification).key
