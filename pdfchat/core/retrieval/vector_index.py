"""
Exact-search vector index with atomic on-disk persistence.

Holds (vector, chunk) records in insertion order and answers k-nearest
queries by a full cosine-similarity scan. The whole index is written as a
single self-describing ``index.npz`` file (float32 vector matrix plus a JSON
manifest with format version, dimension, record count and chunk data) that
is replaced atomically on every save.

Dependencies: numpy, pydantic, pdfchat.models.chunk
System role: Vector storage and similarity search for the retrieval pipeline
"""

import json
import logging
import os
import tempfile
import zipfile
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from pathlib import Path

import numpy as np
from pydantic import ValidationError as PydanticValidationError

from pdfchat.core.exceptions import IndexNotFoundError, PersistenceError, VectorIndexError
from pdfchat.models.chunk import Chunk, IndexRecord, QueryResult

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.npz"
FORMAT_NAME = "pdfchat-vector-index"
FORMAT_VERSION = 1


class BaseVectorIndex(ABC):
    """
    Contract shared by vector index implementations.

    Search results are ordered by descending score with ties broken by
    insertion order, so an approximate index can replace the exact scan
    without changing callers.
    """

    @property
    @abstractmethod
    def dimension(self) -> int | None:
        """Vector dimension, or None while the index is empty."""

    @abstractmethod
    def __len__(self) -> int:
        """Number of stored records."""

    @abstractmethod
    def add(self, records: Sequence[tuple[Sequence[float], Chunk]]) -> list[int]:
        """Append records, returning their ids."""

    @abstractmethod
    def search(self, query_vector: Sequence[float], k: int) -> list[QueryResult]:
        """Return up to k results, best first."""

    @abstractmethod
    def save(self, path: str | Path) -> Path:
        """Persist the index under ``path``."""


class VectorIndex(BaseVectorIndex):
    """In-memory exact cosine index backed by a float32 matrix."""

    def __init__(self) -> None:
        self._vectors = np.empty((0, 0), dtype=np.float32)
        self._chunks: list[Chunk] = []
        self._dimension: int | None = None
        self._dirty = False

    @property
    def dimension(self) -> int | None:
        return self._dimension

    @property
    def dirty(self) -> bool:
        """True when records were added since the last save or load."""
        return self._dirty

    def __len__(self) -> int:
        return len(self._chunks)

    def records(self) -> Iterator[IndexRecord]:
        """Iterate stored records in id order."""
        for record_id, chunk in enumerate(self._chunks):
            yield IndexRecord(
                id=record_id,
                vector=tuple(float(v) for v in self._vectors[record_id]),
                chunk=chunk,
            )

    def copy(self) -> "VectorIndex":
        """
        Return an independent index holding the same records.

        Stored arrays are never modified in place, so they are shared.
        """
        clone = VectorIndex()
        clone._vectors = self._vectors
        clone._chunks = list(self._chunks)
        clone._dimension = self._dimension
        clone._dirty = self._dirty
        return clone

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def add(self, records: Sequence[tuple[Sequence[float], Chunk]]) -> list[int]:
        """
        Append (vector, chunk) records as one batch.

        The first insertion into an empty index fixes its dimension. The batch
        is validated completely before anything is stored, so a rejected batch
        leaves the index untouched.

        Args:
            records: Pairs of embedding vector and chunk

        Returns:
            list[int]: Ids assigned to the new records

        Raises:
            VectorIndexError: On dimension mismatch or non-finite values
        """
        if not records:
            return []

        dimension = self._dimension
        rows: list[np.ndarray] = []
        for position, (vector, _chunk) in enumerate(records):
            row = np.asarray(vector, dtype=np.float32)
            if row.ndim != 1 or row.shape[0] == 0:
                raise VectorIndexError(
                    "Vector must be a non-empty one-dimensional sequence",
                    details={"position": position, "shape": list(row.shape)},
                )
            if dimension is None:
                dimension = row.shape[0]
            if row.shape[0] != dimension:
                raise VectorIndexError(
                    "Vector dimension does not match index dimension",
                    details={"position": position, "expected": dimension, "received": row.shape[0]},
                )
            if not np.all(np.isfinite(row)):
                raise VectorIndexError(
                    "Vector contains non-finite values",
                    details={"position": position},
                )
            rows.append(row)

        matrix = np.vstack(rows)
        first_id = len(self._chunks)

        if first_id == 0:
            self._vectors = matrix
        else:
            self._vectors = np.vstack([self._vectors, matrix])
        self._chunks.extend(chunk for _vector, chunk in records)
        self._dimension = dimension
        self._dirty = True

        return list(range(first_id, first_id + len(records)))

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def search(self, query_vector: Sequence[float], k: int) -> list[QueryResult]:
        """
        Exact k-nearest-neighbour search by cosine similarity.

        Args:
            query_vector: Query embedding of the index dimension
            k: Maximum number of results

        Returns:
            list[QueryResult]: At most min(k, len(self)) results, best first,
            equal scores in insertion order

        Raises:
            ValueError: When k is negative
            VectorIndexError: When the query dimension does not match
        """
        if k < 0:
            raise ValueError(f"k must be non-negative, got {k}")
        if k == 0 or not self._chunks:
            return []

        query = np.asarray(query_vector, dtype=np.float32)
        if query.ndim != 1 or query.shape[0] != self._dimension:
            raise VectorIndexError(
                "Query dimension does not match index dimension",
                details={"expected": self._dimension, "received": list(query.shape)},
            )

        scores = self._cosine_scores(query)
        # Stable sort keeps insertion order among equal scores.
        order = np.argsort(-scores, kind="stable")[:k]
        return [
            QueryResult(chunk=self._chunks[i], score=float(scores[i]))
            for i in order
        ]

    def _cosine_scores(self, query: np.ndarray) -> np.ndarray:
        dots = self._vectors @ query
        norms = np.linalg.norm(self._vectors, axis=1)
        denominators = norms * np.linalg.norm(query)
        scores = np.zeros_like(dots)
        np.divide(dots, denominators, out=scores, where=denominators > 0)
        return scores

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, path: str | Path) -> Path:
        """
        Write the index to ``path/index.npz`` atomically.

        Data goes to a temporary file in the same directory which is fsynced
        and then renamed over the previous file, so a crash leaves either the
        old or the new state on disk.

        Args:
            path: Index directory (created if missing)

        Returns:
            Path: Location of the written file

        Raises:
            PersistenceError: When the directory, write or rename fails
        """
        directory = Path(path)
        target = directory / INDEX_FILENAME
        manifest = {
            "format": FORMAT_NAME,
            "version": FORMAT_VERSION,
            "dimension": self._dimension,
            "count": len(self._chunks),
            "chunks": [chunk.model_dump() for chunk in self._chunks],
        }
        manifest_bytes = np.frombuffer(json.dumps(manifest).encode("utf-8"), dtype=np.uint8)

        tmp_name: str | None = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".index-", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "wb") as fh:
                np.savez(fh, vectors=self._vectors, manifest=manifest_bytes)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, target)
        except Exception as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise PersistenceError(f"Failed to persist vector index: {e}", path=str(target)) from e

        self._dirty = False
        logger.info(
            "Vector index saved",
            extra={"index_path": str(target), "record_count": len(self._chunks)},
        )
        return target

    @classmethod
    def load(cls, path: str | Path) -> "VectorIndex":
        """
        Read an index written by :meth:`save`.

        Args:
            path: Index directory

        Returns:
            VectorIndex: Reconstructed index

        Raises:
            IndexNotFoundError: When no index file exists under ``path``
            VectorIndexError: When the file is corrupted, truncated or of
                another format version
        """
        target = Path(path) / INDEX_FILENAME
        if not target.is_file():
            raise IndexNotFoundError(str(target))

        try:
            with np.load(target, allow_pickle=False) as data:
                vectors = data["vectors"]
                manifest = json.loads(data["manifest"].tobytes().decode("utf-8"))
        except (OSError, ValueError, KeyError, zipfile.BadZipFile, UnicodeDecodeError) as e:
            raise VectorIndexError(
                f"Persisted vector index is unreadable: {e}",
                details={"index_path": str(target)},
            ) from e

        index = cls()
        index._restore(vectors, manifest, target)
        logger.info(
            "Vector index loaded",
            extra={"index_path": str(target), "record_count": len(index), "dimension": index.dimension},
        )
        return index

    def _restore(self, vectors: np.ndarray, manifest: object, target: Path) -> None:
        def corrupted(reason: str) -> VectorIndexError:
            return VectorIndexError(
                f"Persisted vector index rejected: {reason}",
                details={"index_path": str(target)},
            )

        if not isinstance(manifest, dict) or manifest.get("format") != FORMAT_NAME:
            raise corrupted("unknown format")
        if manifest.get("version") != FORMAT_VERSION:
            raise corrupted(f"unsupported version {manifest.get('version')!r}")

        count = manifest.get("count")
        dimension = manifest.get("dimension")
        raw_chunks = manifest.get("chunks")
        if not isinstance(count, int) or not isinstance(raw_chunks, list) or len(raw_chunks) != count:
            raise corrupted("record count mismatch")
        if vectors.dtype != np.float32 or vectors.ndim != 2:
            raise corrupted("vector matrix has wrong type")

        if count == 0:
            if dimension is not None or vectors.shape[0] != 0:
                raise corrupted("empty index carries vectors")
            return

        if not isinstance(dimension, int) or vectors.shape != (count, dimension):
            raise corrupted("vector matrix shape does not match dimension and count")
        if not np.all(np.isfinite(vectors)):
            raise corrupted("vector matrix contains non-finite values")

        try:
            chunks = [Chunk.model_validate(raw) for raw in raw_chunks]
        except PydanticValidationError as e:
            raise corrupted(f"invalid chunk data ({e.error_count()} errors)") from e

        self._vectors = vectors
        self._chunks = chunks
        self._dimension = dimension
        self._dirty = False
