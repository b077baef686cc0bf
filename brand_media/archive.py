"""In-memory archive that collects media entries before zipping them once."""

from __future__ import annotations

import io
import zipfile
from typing import Dict, Iterator, List, Tuple

ARCHIVE_CONTENT_TYPE = "application/zip"


class MediaArchive:
    """Ordered collection of ``(path, bytes)`` entries keyed by path.

    Writing an existing path replaces its bytes and moves the entry to the
    end, so iteration order always reflects the order of the last writes.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, bytes] = {}

    def add(self, path: str, data: bytes) -> None:
        path = path.lstrip("/")
        if not path:
            raise ValueError("Archive entries need a non-empty path")
        self._entries.pop(path, None)
        self._entries[path] = bytes(data)

    def extend(self, other: "MediaArchive") -> None:
        for path, data in other:
            self.add(path, data)

    def get(self, path: str) -> bytes:
        return self._entries[path]

    @property
    def paths(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __iter__(self) -> Iterator[Tuple[str, bytes]]:
        return iter(list(self._entries.items()))

    def __len__(self) -> int:
        return len(self._entries)

    def to_zip_bytes(self) -> bytes:
        """Serialize the entries into a zip file."""
        buffer = io.BytesIO()
        # Media payloads are already compressed; storing them keeps zipping fast.
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_STORED) as bundle:
            for path, data in self._entries.items():
                bundle.writestr(path, data)
        return buffer.getvalue()
