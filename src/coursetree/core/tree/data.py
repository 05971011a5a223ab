"""Course directory: config plus one content tree per language."""

import json
from typing import Any

from loguru import logger

from coursetree.config import CONFIG_FILE_STEM, DEFAULT_JSONEXT
from coursetree.core.tree.identity import check_ids
from coursetree.core.tree.language import Language, dump_json
from coursetree.models.content import Violation
from coursetree.protocols import FileSystemProtocol


class CourseData:
    """All languages found in a course directory, plus its config.

    Call ``load`` before use. Mutations are persisted only by ``save``.
    """

    def __init__(
        self,
        fs: FileSystemProtocol,
        course_dir: str,
        *,
        jsonext: str = DEFAULT_JSONEXT,
    ) -> None:
        self.fs = fs
        self.course_dir = course_dir.rstrip("/")
        self.jsonext = jsonext
        self.config: dict[str, Any] = {}
        self.config_changed = False
        self.languages: dict[str, Language] = {}

    @property
    def config_path(self) -> str:
        return f"{self.course_dir}/{CONFIG_FILE_STEM}.{self.jsonext}"

    def load(self, *, validate: bool = True) -> "CourseData":
        """Read the config and every language folder holding a course file.

        With validate, a language that is not a valid tree raises StructuralError.
        """
        try:
            self.config = json.loads(self.fs.read_file(self.config_path).decode("utf-8-sig"))
        except FileNotFoundError:
            logger.warning("No config file at {}", self.config_path)
            self.config = {}
        except json.JSONDecodeError as exc:
            msg = f"Cannot parse {self.config_path}: {exc}"
            raise ValueError(msg) from exc

        self.languages = {}
        for name in self.find_language_names():
            self.languages[name] = Language.load(
                self.fs, self.course_dir, name, jsonext=self.jsonext, validate=validate
            )

        logger.debug("Loaded {} language(s) from {}", len(self.languages), self.course_dir)
        return self

    def find_language_names(self) -> list[str]:
        """Folders of the course directory that contain a course file."""
        course_file = f"course.{self.jsonext}"
        names = []
        for entry in self.fs.list_dir(self.course_dir):
            if not entry.endswith("/"):
                continue
            name = entry.rstrip("/")
            if course_file in self.fs.list_dir(f"{self.course_dir}/{name}"):
                names.append(name)
        return names

    @property
    def language_names(self) -> list[str]:
        return list(self.languages)

    @property
    def default_language(self) -> str | None:
        return self.config.get("_defaultLanguage")

    def has_language(self, name: str) -> bool:
        return name in self.languages

    def get_language(self, name: str) -> Language:
        try:
            return self.languages[name]
        except KeyError:
            msg = f"Language {name!r} not found in {self.course_dir}"
            raise ValueError(msg) from None

    def copy_language(
        self,
        from_name: str,
        to_name: str,
        *,
        replace_existing: bool = False,
    ) -> Language:
        """Duplicate a language under a new name, keeping every item id.

        The copy is only held in memory until ``save`` is called.
        """
        source = self.get_language(from_name)
        if to_name in self.languages and not replace_existing:
            msg = f"Language {to_name!r} already exists in {self.course_dir}"
            raise ValueError(msg)

        duplicate = source.copy(to_name)
        self.languages[to_name] = duplicate
        logger.info(
            "Copied language {!r} to {!r} ({} items)", from_name, to_name, len(duplicate.items)
        )
        return duplicate

    def check_ids(self) -> dict[str, list[Violation]]:
        return {name: check_ids(language) for name, language in self.languages.items()}

    def mark_config_changed(self) -> None:
        self.config_changed = True

    def save(self, *, force: bool = False) -> None:
        """Write the config and changed collections of every language."""
        if self.config_changed or force:
            self.fs.write_file(self.config_path, dump_json(self.config))
            self.config_changed = False
        for language in self.languages.values():
            language.save(self.fs, self.course_dir, force=force)
