"""Human-readable envelope identifiers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from re import fullmatch

ENVELOPE_CODE_PATTERN = r"([A-Z0-9]{2,8})-(\d{4}-\d{2}-\d{2})-(\d{3,})"


@dataclass(frozen=True, slots=True)
class EnvelopeCode:
    """Parsed parts of an envelope identifier."""

    unit_code: str
    envelope_date: date
    sequence: int

    def __str__(self) -> str:
        return build_envelope_code(self.unit_code, self.envelope_date, self.sequence)


def build_envelope_code(unit_code: str, envelope_date: date, sequence: int) -> str:
    """Return ``UNIT-YYYY-MM-DD-SEQ`` with the sequence padded to three digits."""

    if sequence < 1:
        raise ValueError("Envelope sequence must be positive")
    return f"{unit_code.strip().upper()}-{envelope_date.isoformat()}-{sequence:03d}"


def parse_envelope_code(value: str) -> EnvelopeCode:
    """Split an envelope identifier back into unit, date and sequence."""

    match = fullmatch(ENVELOPE_CODE_PATTERN, value.strip().upper())
    if match is None:
        raise ValueError(f"Invalid envelope code: {value!r}")
    return EnvelopeCode(
        unit_code=match.group(1),
        envelope_date=date.fromisoformat(match.group(2)),
        sequence=int(match.group(3)),
    )
