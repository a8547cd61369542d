"""ZIP container reader and writer for EPUB archives."""

from __future__ import annotations

import io
import logging
import zipfile
import zlib
from types import TracebackType

from src.epub.errors import ArchiveAssemblyError, ArchiveOpenError, MemberReadError
from src.epub.models import DEFAULT_DATE_TIME, ArchiveMember, CompressionHint

logger = logging.getLogger(__name__)

_COMPRESS_TYPES = {
    CompressionHint.STORE: zipfile.ZIP_STORED,
    CompressionHint.DEFLATE: zipfile.ZIP_DEFLATED,
}

_FILE_ATTR = 0o100644 << 16
_DIR_ATTR = (0o40755 << 16) | 0x10

# Exceptions zipfile raises for a corrupt, encrypted or unsupported member
_READ_ERRORS = (zipfile.BadZipFile, zlib.error, NotImplementedError, RuntimeError, EOFError, OSError)


class ZipArchiveReader:
    """Read-only view of an archive held in memory.

    Duplicate member names keep the position of their first occurrence and
    the content of their last occurrence.

    Raises:
        ArchiveOpenError: If the data is not a readable ZIP archive.
    """

    def __init__(self, data: bytes) -> None:
        try:
            self._zip = zipfile.ZipFile(io.BytesIO(data), "r")
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError) as exc:
            raise ArchiveOpenError(f"Input is not a readable archive: {exc}") from exc

        latest: dict[str, zipfile.ZipInfo] = {}
        order: list[str] = []
        for info in self._zip.infolist():
            if info.filename in latest:
                logger.warning("Duplicate member name '%s': keeping the last copy", info.filename)
            else:
                order.append(info.filename)
            latest[info.filename] = info

        self._members = [self._to_member(latest[name]) for name in order]

    def __enter__(self) -> ZipArchiveReader:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def members(self) -> list[ArchiveMember]:
        """Members in native archive order."""
        return list(self._members)

    def close(self) -> None:
        self._zip.close()

    def _to_member(self, info: zipfile.ZipInfo) -> ArchiveMember:
        def read() -> bytes:
            try:
                return self._zip.read(info)
            except _READ_ERRORS as exc:
                raise MemberReadError(info.filename, f"{type(exc).__name__}: {exc}") from exc

        return ArchiveMember(
            name=info.filename,
            is_directory=info.is_dir(),
            reader=read,
            date_time=info.date_time,
        )


class ZipArchiveWriter:
    """Builds an output archive in memory, member by member."""

    def __init__(self, compress_level: int | None = None) -> None:
        self._buffer = io.BytesIO()
        self._zip = zipfile.ZipFile(self._buffer, "w", compresslevel=compress_level)
        self._names: set[str] = set()
        self._finalized = False

    @property
    def names(self) -> list[str]:
        return [info.filename for info in self._zip.infolist()]

    def add(
        self,
        name: str,
        data: bytes,
        hint: CompressionHint,
        date_time: tuple[int, int, int, int, int, int] = DEFAULT_DATE_TIME,
    ) -> None:
        """Append a file member.

        Raises:
            ArchiveAssemblyError: If the name was already written or the
                member cannot be stored.
        """
        info = zipfile.ZipInfo(name, date_time=date_time)
        info.compress_type = _COMPRESS_TYPES[hint]
        info.external_attr = _FILE_ATTR
        self._write(info, data)

    def add_directory(
        self,
        name: str,
        date_time: tuple[int, int, int, int, int, int] = DEFAULT_DATE_TIME,
    ) -> None:
        """Append a directory entry with no payload."""
        if not name.endswith("/"):
            name = f"{name}/"
        info = zipfile.ZipInfo(name, date_time=date_time)
        info.compress_type = zipfile.ZIP_STORED
        info.external_attr = _DIR_ATTR
        self._write(info, b"")

    def finalize(self) -> bytes:
        """Close the archive and return its bytes.

        Raises:
            ArchiveAssemblyError: If the central directory cannot be written.
        """
        if not self._finalized:
            try:
                self._zip.close()
            except (OSError, ValueError, zipfile.LargeZipFile) as exc:
                raise ArchiveAssemblyError(f"Cannot finalize archive: {exc}") from exc
            self._finalized = True
        return self._buffer.getvalue()

    def _write(self, info: zipfile.ZipInfo, data: bytes) -> None:
        if self._finalized:
            raise ArchiveAssemblyError("Archive already finalized")
        if info.filename in self._names:
            raise ArchiveAssemblyError(f"Duplicate member name: {info.filename}")
        try:
            self._zip.writestr(info, data)
        except (OSError, ValueError, zipfile.LargeZipFile, zlib.error) as exc:
            raise ArchiveAssemblyError(f"Cannot write member '{info.filename}': {exc}") from exc
        self._names.add(info.filename)
