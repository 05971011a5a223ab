"""Protocols for dependency injection across the content tree and translation pipeline."""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from coursetree.models.translation import DecodeResult, TranslationUnit


@runtime_checkable
class FileSystemProtocol(Protocol):
    """Protocol for the filesystem used to read and write course files.

    All paths are relative to the filesystem root and use forward slashes.
    """

    def read_file(self, path: str) -> bytes:
        """Return the contents of a file. Raises FileNotFoundError if missing."""
        ...

    def write_file(self, path: str, contents: bytes) -> None:
        """Write a file, creating parent directories."""
        ...

    def list_dir(self, path: str) -> list[str]:
        """List entries of a directory, sorted. Subdirectories end with "/"."""
        ...


@runtime_checkable
class SchemaIndexProtocol(Protocol):
    """Read-only answers about which fields are translatable and their defaults."""

    def is_translatable(self, item_type: str, field_path: str) -> bool:
        """Return True if the field at field_path of an item_type item is translatable."""
        ...

    def defaults_for(self, item_type: str) -> dict[str, Any]:
        """Return an object holding the schema defaults for item_type."""
        ...


@runtime_checkable
class CodecProtocol(Protocol):
    """Protocol for interchange codecs."""

    extension: str

    def encode(
        self,
        units: Sequence[TranslationUnit],
        *,
        source_lang: str,
        target_lang: str | None = None,
    ) -> dict[str, bytes]:
        """Encode units into file name -> file contents."""
        ...

    def decode(
        self, files: Mapping[str, bytes], *, target_lang: str | None = None
    ) -> DecodeResult:
        """Decode file name -> file contents into units and per-unit warnings.

        Codecs that record a target language skip content meant for another one.
        """
        ...
