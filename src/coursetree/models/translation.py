"""Models moved between content trees and interchange files."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TranslationUnit:
    """One translatable value: the item it belongs to and where it sits inside it."""

    item_id: str
    item_type: str
    field_path: str
    value: str
    context: str | None = None


@dataclass(frozen=True)
class UnitWarning:
    """A non-fatal problem with a single unit during decode or merge."""

    kind: str
    item_id: str | None
    field_path: str | None
    message: str


@dataclass(frozen=True)
class DecodeResult:
    """Units decoded from interchange files, plus rows that had to be skipped."""

    units: list[TranslationUnit] = field(default_factory=list)
    warnings: list[UnitWarning] = field(default_factory=list)


@dataclass
class MergeReport:
    """Summary of a merge into a target language."""

    applied: int = 0
    skipped_existing: int = 0
    dangling: int = 0
    warnings: list[UnitWarning] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def problems(self) -> list[UnitWarning]:
        """Warnings other than kept translations."""
        return [w for w in self.warnings if w.kind != "skipped"]

    def warn(self, kind: str, item_id: str | None, field_path: str | None, message: str) -> None:
        self.warnings.append(
            UnitWarning(kind=kind, item_id=item_id, field_path=field_path, message=message)
        )
