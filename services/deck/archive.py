"""In-memory view over the zip container of a deck."""

from __future__ import annotations

import io
import zipfile
import zlib

from shared.exceptions import CorruptArchive, SerializationFailure
from shared.utils import setup_logging

from .ooxml import CONTENT_TYPES_PATH

logger = setup_logging("deck-archive")

# Fixed member timestamp so serialization is reproducible
_ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)


class ArchiveStore:
    """Ordered mapping of part path -> bytes loaded from a zip container.

    ``put`` on an existing path replaces the content and keeps the member's
    position; new paths are appended. Nothing is written anywhere until
    :meth:`serialize` is called.
    """

    def __init__(self, parts: dict[str, bytes] | None = None) -> None:
        self._parts: dict[str, bytes] = dict(parts or {})

    @classmethod
    def load(cls, data: bytes) -> "ArchiveStore":
        """Read every member of ``data`` into memory.

        Raises:
            CorruptArchive: if ``data`` is not a readable zip container.
        """
        if not data:
            raise CorruptArchive("Archive is empty")
        parts: dict[str, bytes] = {}
        try:
            with zipfile.ZipFile(io.BytesIO(data), "r") as archive:
                for info in archive.infolist():
                    if info.is_dir():
                        continue
                    parts[info.filename] = archive.read(info)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error, EOFError, NotImplementedError) as exc:
            raise CorruptArchive(f"Not a valid presentation archive: {exc}") from exc
        logger.debug("Loaded archive with %d parts", len(parts))
        return cls(parts)

    def get(self, path: str) -> bytes | None:
        return self._parts.get(path)

    def get_text(self, path: str) -> str | None:
        data = self._parts.get(path)
        if data is None:
            return None
        return data.decode("utf-8")

    def put(self, path: str, data: bytes | str) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._parts[path] = data

    def exists(self, path: str) -> bool:
        return path in self._parts

    def paths(self) -> list[str]:
        return list(self._parts)

    def clone(self) -> "ArchiveStore":
        """Independent copy for staged mutation; part bytes are immutable so a shallow copy suffices."""
        return ArchiveStore(self._parts)

    def __len__(self) -> int:
        return len(self._parts)

    def __contains__(self, path: object) -> bool:
        return path in self._parts

    def serialize(self, compresslevel: int = 6) -> bytes:
        """Write all parts to a DEFLATE-compressed zip, content-type registry first.

        Raises:
            SerializationFailure: if the container cannot be written.
        """
        ordered = sorted(self._parts, key=lambda name: name != CONTENT_TYPES_PATH)
        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(
                buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=compresslevel
            ) as archive:
                for name in ordered:
                    info = zipfile.ZipInfo(name, date_time=_ZIP_DATE_TIME)
                    info.compress_type = zipfile.ZIP_DEFLATED
                    archive.writestr(info, self._parts[name], compresslevel=compresslevel)
        except (OSError, ValueError, zlib.error, zipfile.LargeZipFile) as exc:
            raise SerializationFailure(f"Failed to write presentation archive: {exc}") from exc
        return buffer.getvalue()
