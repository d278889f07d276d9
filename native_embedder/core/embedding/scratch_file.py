"""Append-only JSON scratch file for spilling embeddings to disk.

Embedding a large document batch by batch would otherwise keep every vector
in memory until the last batch finished. Each batch is serialized and
appended here instead, so at most one batch's vectors are resident at a time.

The file holds a JSON array of per-batch arrays:

    [[v1, v2, ...], [v26, v27, ...], ...]

Writes are best-effort: a failed append is logged and skipped, which leaves
invalid JSON behind and fails loudly at read-back.
"""

import json
import logging
import uuid
from pathlib import Path
from typing import Any

from native_embedder.domain.exceptions import ScratchFileCorruptError

logger = logging.getLogger(__name__)


class ScratchFile:
    """Uniquely named scratch file owned by a single embedding call.

    Lifecycle: open() → append_batch()* → close() → read_back(). read_back()
    always deletes the file. Nothing appended is kept in memory; only the
    count of written fragments is tracked.

    Args:
        directory: Directory the file is created in (created if missing).
    """

    def __init__(self, directory: Path) -> None:
        self.path = directory / f"{uuid.uuid4()}.tmp"
        self.fragments_written = 0

    @classmethod
    def create(cls, directory: Path) -> "ScratchFile":
        """Create and open a new scratch file in directory."""
        directory.mkdir(parents=True, exist_ok=True)
        scratch = cls(directory)
        scratch.open()
        return scratch

    def open(self) -> None:
        """Write the opening array bracket."""
        self._append("[")

    def append_batch(self, vectors: Any) -> None:
        """Append one batch of vectors as a JSON array fragment.

        Args:
            vectors: 2D numpy array or list of float lists.
        """
        if hasattr(vectors, "tolist"):
            vectors = vectors.tolist()
        fragment = json.dumps(vectors)
        if self.fragments_written > 0:
            fragment = "," + fragment
        self._append(fragment)
        self.fragments_written += 1

    def close(self) -> None:
        """Write the closing array bracket."""
        self._append("]")

    def read_back(self) -> list[Any]:
        """Parse the file and delete it.

        The file is deleted even when parsing fails.

        Returns:
            The per-batch arrays, in append order.

        Raises:
            ScratchFileCorruptError: If the file is missing or not valid JSON.
        """
        try:
            with self.path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ScratchFileCorruptError(str(self.path), e) from e
        finally:
            self.discard()

    def discard(self) -> None:
        """Delete the file, logging rather than raising on failure."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("Failed to delete scratch file %s: %s", self.path, e)

    def _append(self, data: str) -> None:
        try:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(data)
        except OSError as e:
            logger.error("Error writing to scratch file %s: %s", self.path, e)
