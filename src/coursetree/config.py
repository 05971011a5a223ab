"""Configuration constants and project options for coursetree."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

# Environment variable naming the project root. Falls back to the cwd.
ROOT_ENV_VAR: str = "COURSETREE_ROOT"

# Content item types, in the order their collections are declared on disk.
ITEM_TYPES: tuple[str, ...] = ("course", "menu", "page", "article", "block", "component")

# Collection name -> item types stored in it. The course collection holds a single object.
COLLECTIONS: dict[str, tuple[str, ...]] = {
    "course": ("course",),
    "contentObjects": ("menu", "page"),
    "articles": ("article",),
    "blocks": ("block",),
    "components": ("component",),
}
SINGLE_OBJECT_COLLECTIONS: frozenset[str] = frozenset({"course"})

CONFIG_FILE_STEM: str = "config"

DEFAULT_TRACKING_ID_TYPE: str = "block"
DEFAULT_MASTER_LANG: str = "en"
DEFAULT_JSONEXT: str = "json"

# Interchange formats.
FORMATS: tuple[str, ...] = ("csv", "json", "xlf")
DEFAULT_FORMAT: str = "csv"
CSV_DELIMITER_CANDIDATES: tuple[str, ...] = (",", ";", "\t", "|")
DEFAULT_CSV_DELIMITER: str = ","
# Spreadsheet tools need the BOM to pick the right charset.
DEFAULT_CSV_ENCODING: str = "utf-8-sig"
JSON_BUNDLE_FILENAME: str = "export.json"
XLIFF_FILENAME: str = "source.xlf"

# Interchange files live here, one folder per language.
LANGUAGE_FILES_DIR: str = "languagefiles"

# Project manifest at the root; its "version" is the course framework version.
PACKAGE_FILE: str = "package.json"


def resolve_root_directory() -> Path:
    """Return the project root: $COURSETREE_ROOT if set, else the working directory."""
    env_root = os.environ.get(ROOT_ENV_VAR)
    if env_root:
        return Path(env_root).expanduser()
    return Path.cwd()


@dataclass(frozen=True)
class ProjectConfig:
    """Locations and options of one course project.

    Paths other than ``root_dir`` are relative to the root, which is where the
    filesystem abstraction is anchored.
    """

    root_dir: Path = field(default_factory=resolve_root_directory)
    source_dir: str = "src"
    output_dir: str = "build"
    course_dir: str = "course"
    schema_dir: str = "schemas"
    jsonext: str = DEFAULT_JSONEXT
    tracking_id_type: str = DEFAULT_TRACKING_ID_TYPE
    use_output_data: bool = False

    @property
    def data_dir(self) -> str:
        """Course directory relative to the root (src/course or build/course)."""
        base = self.output_dir if self.use_output_data else self.source_dir
        return f"{base}/{self.course_dir}"

    def language_files_dir(self, lang: str) -> str:
        return f"{LANGUAGE_FILES_DIR}/{lang}"

    @property
    def version(self) -> str | None:
        """The "version" field of the root package.json, or None if there is none.

        Raises:
            ValueError: If package.json exists but is not a JSON object.
        """
        path = Path(self.root_dir) / PACKAGE_FILE
        try:
            manifest = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as exc:
            msg = f"Invalid JSON in {path}: {exc}"
            raise ValueError(msg) from exc
        if not isinstance(manifest, dict):
            msg = f"{path} does not hold a JSON object"
            raise ValueError(msg)
        version = manifest.get("version")
        return str(version) if version is not None else None
