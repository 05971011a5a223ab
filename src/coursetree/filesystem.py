"""Local filesystem access that tracks changes and supports dry runs."""

from pathlib import Path

from loguru import logger

# Extensions coursetree is allowed to write.
WRITABLE_SUFFIXES: tuple[str, ...] = (".json", ".txt", ".csv", ".xlf")


class LocalFileSystem:
    """Read and write course files under a root directory.

    - Do not rewrite files whose contents are unchanged.
    - Refuse paths that escape the root.
    - In dry-run mode, log what would be written instead of writing it.
    """

    def __init__(self, root: str | Path, *, dry_run: bool = False) -> None:
        self.root = str(Path(root).resolve())
        self.dry_run = dry_run

        if not Path(self.root).is_dir():
            msg = f"Root directory {self.root!r} not found"
            raise ValueError(msg)

        logger.debug("Filesystem ready, root {!r}, dry_run {!r}", self.root, dry_run)

        # list of (action, path) tuples
        self.updates: list[tuple[str, str]] = []
        self._num_same = 0

    def _resolve(self, path: str) -> Path:
        if Path(path).is_absolute():
            msg = f"must be relative: {path!r}"
            raise ValueError(msg)
        full = Path(self.root) / path
        resolved = str(full.resolve())
        if resolved != self.root and not resolved.startswith(self.root + "/"):
            msg = f"Path escapes root: {path!r}"
            raise ValueError(msg)
        return full

    def is_possible_output(self, path: str) -> bool:
        """Check if a file is one coursetree may write."""
        return path.endswith(WRITABLE_SUFFIXES)

    def read_file(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()

    def write_file(self, path: str, contents: bytes) -> None:
        """Write contents to a file relative to the root.

        Skips the write when the file already holds the same bytes.
        """
        full = self._resolve(path)
        if not self.is_possible_output(path):
            msg = f"Wanted to write {path!r} but is_possible_output() returns False"
            raise ValueError(msg)

        action = "create"
        try:
            if full.read_bytes() == contents:
                self._num_same += 1
                return
            action = "update"
        except FileNotFoundError:
            pass

        self.updates.append((action, path))

        if self.dry_run:
            logger.info("dry-run: would {} {!r}", action, path)
        else:
            logger.debug("Writing ({}) {!r}", action, path)
            full.parent.mkdir(parents=True, exist_ok=True)
            full.write_bytes(contents)

    def list_dir(self, path: str) -> list[str]:
        """List a directory. Subdirectories are returned with a trailing "/"."""
        full = self._resolve(path)
        return sorted(
            entry.name + "/" if entry.is_dir() else entry.name for entry in full.iterdir()
        )

    def summary(self) -> str:
        created = sum(1 for action, _ in self.updates if action == "create")
        updated = sum(1 for action, _ in self.updates if action == "update")
        return f"{created} created, {updated} updated, {self._num_same} same"
