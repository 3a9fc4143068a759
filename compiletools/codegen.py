"""Comparing the codegen-unit assignment of translation items."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

PREFIX = "TRANS_ITEM "
CGU_MARKER = "@@"


@dataclass(frozen=True)
class TransItem:
    """One translation item and the codegen units it belongs to."""

    name: str
    codegen_units: frozenset[str]
    string: str

    @classmethod
    def from_str(cls, s: str) -> TransItem:
        """Parse ``[TRANS_ITEM] name [@@ (cgu)+]``."""
        s = s[len(PREFIX):].strip() if s.startswith(PREFIX) else s.strip()
        parts = [part.strip() for part in s.split(CGU_MARKER) if part.strip()]
        if not parts:
            raise ValueError(f"no item name in {s!r}")
        cgus: frozenset[str] = frozenset()
        if len(parts) > 1:
            cgus = frozenset(cgu for cgu in parts[1].split(" ") if cgu.strip())
        return cls(name=parts[0], codegen_units=cgus, string=PREFIX + s)


def codegen_units_to_str(cgus: Iterable[str]) -> str:
    """Sorted codegen unit names, each followed by a space."""
    return "".join(f"{cgu} " for cgu in sorted(cgus))


@dataclass
class CodegenUnitReport:
    """Differences between expected and actual translation items."""

    missing: list[str] = field(default_factory=list)
    unexpected: list[str] = field(default_factory=list)
    wrong_cgus: list[tuple[TransItem, TransItem]] = field(default_factory=list)

    def ok(self) -> bool:
        return not (self.missing or self.unexpected or self.wrong_cgus)

    def render(self) -> str:
        out = []
        if self.missing:
            out.append("\nThese items should have been contained but were not:\n\n")
            out.extend(f"{item}\n" for item in self.missing)
            out.append("\n\n")
        if self.unexpected:
            out.append("\nThese items were contained but should not have been:\n\n")
            out.extend(f"{item}\n" for item in self.unexpected)
            out.append("\n\n")
        if self.wrong_cgus:
            out.append("\nThe following items were assigned to wrong codegen units:\n\n")
            for expected_item, actual_item in self.wrong_cgus:
                out.append(
                    f"{expected_item.name}\n"
                    f"  expected: {codegen_units_to_str(expected_item.codegen_units)}\n"
                    f"  actual:   {codegen_units_to_str(actual_item.codegen_units)}\n"
                    "\n"
                )
        return "".join(out)


def compare_trans_items(expected: Iterable[TransItem],
                        actual: Iterable[TransItem]) -> CodegenUnitReport:
    """Compare expected items against the items the compiler reported."""
    expected = list(expected)
    actual = list(actual)
    by_name: dict[str, TransItem] = {}
    for item in actual:
        by_name.setdefault(item.name, item)

    report = CodegenUnitReport()
    for expected_item in expected:
        actual_item = by_name.get(expected_item.name)
        if actual_item is None:
            report.missing.append(expected_item.string)
        elif (expected_item.codegen_units
              and expected_item.codegen_units != actual_item.codegen_units):
            report.wrong_cgus.append((expected_item, actual_item))

    expected_names = {item.name for item in expected}
    report.missing.sort()
    report.unexpected = sorted(
        item.string for item in actual if item.name not in expected_names
    )
    report.wrong_cgus.sort(key=lambda pair: pair[0].name)
    return report