"""
Trace snapshot loading using streaming parser.
"""

import logging
import unicodedata
from pathlib import Path
from typing import List, Optional, Tuple

import ijson

from ..core.types import TraceSnapshot, TraceSnapshotError
from ..extractors import RecordExtractor

logger = logging.getLogger(__name__)


class TraceSnapshotLoader:
    """Loads the most recent trace snapshot from a traces directory."""

    @staticmethod
    def find_latest_file(traces_dir: Path) -> Optional[Path]:
        """
        Pick the latest snapshot file by filename order.

        Snapshot names are expected to embed a sortable timestamp; the last
        name in locale-aware order wins. Hidden files and subdirectories are
        ignored.

        Args:
            traces_dir: Directory holding snapshot files

        Returns:
            Path of the latest snapshot, or None if there is none
        """
        if not traces_dir.is_dir():
            return None

        candidates = [
            entry for entry in traces_dir.iterdir()
            if entry.is_file() and not entry.name.startswith('.')
        ]
        if not candidates:
            return None

        candidates.sort(key=lambda p: TraceSnapshotLoader.collation_key(p.name))
        return candidates[-1]

    @staticmethod
    def collation_key(name: str) -> Tuple[str, str, str]:
        """
        Sort key ordering names the way a locale-aware comparison does.

        Letters compare case- and accent-insensitively first, so 'b.json'
        sorts before 'C.json'. Ties are broken by accents, then lowercase
        before uppercase.

        Args:
            name: File name

        Returns:
            Tuple usable as a sort key
        """
        decomposed = unicodedata.normalize('NFD', name)
        base = ''.join(c for c in decomposed if not unicodedata.combining(c))
        return base.casefold(), decomposed.casefold(), name.swapcase()

    @staticmethod
    def load(traces_dir: str) -> TraceSnapshot:
        """
        Load and parse the latest snapshot in a directory.

        A missing or empty directory is not an error: tests may not have run yet.

        Args:
            traces_dir: Path to the traces directory

        Returns:
            TraceSnapshot with records in file order

        Raises:
            TraceSnapshotError: If the snapshot is not a JSON array of valid traces
        """
        latest = TraceSnapshotLoader.find_latest_file(Path(traces_dir))
        if latest is None:
            logger.debug("No trace snapshots in %s", traces_dir)
            return TraceSnapshot()

        records = TraceSnapshotLoader.parse_file(latest)
        logger.info("Loaded %d traces from %s", len(records), latest)
        return TraceSnapshot(source_path=latest, records=tuple(records))

    @staticmethod
    def parse_file(file_path: Path) -> List:
        """
        Parse a snapshot file into trace records.

        Args:
            file_path: Path to the snapshot file

        Returns:
            List of TraceRecord objects

        Raises:
            TraceSnapshotError: If the file content is malformed
        """
        records = []
        with open(file_path, 'rb') as f:
            try:
                events = ijson.parse(f)
                first = next(events, None)
                if first is None or first[1] != 'start_array':
                    raise TraceSnapshotError(f"{file_path.name}: expected a JSON array of traces")

                f.seek(0)
                for index, entry in enumerate(ijson.items(f, 'item', use_float=True)):
                    records.append(RecordExtractor.from_dict(entry, index))
            except (ijson.JSONError, UnicodeDecodeError) as e:
                raise TraceSnapshotError(f"{file_path.name}: invalid JSON: {e}") from e
        return records
