"""Export of a user's notes as a zip archive.

The archive is produced incrementally: every note is compressed and its
bytes handed back to the caller before the next note is read, so the
full archive never has to be held in memory.
"""

import asyncio
import logging
import time
import zipfile
from collections.abc import AsyncIterator, Iterable

from ..db.models.note import NoteDO

logger = logging.getLogger(__name__)

DEFAULT_COMPRESSION_LEVEL = 3
UNTITLED = "Untitled"

# Zip (DOS) timestamps cover 1980 through 2107.
_MIN_DATE_TIME = (1980, 1, 1, 0, 0, 0)
_MAX_DATE_TIME = (2107, 12, 31, 23, 59, 58)


class ExportFilenames:
    """Hands out unique markdown file names within a single export.

    The first note with a title gets `<title>.md`, later ones get
    `<title>-0.md`, `<title>-1.md` and so on. Slashes are replaced with
    dashes so a title never turns into a directory inside the archive.
    """

    def __init__(self) -> None:
        self._used: set[str] = set()

    def claim(self, title: str | None) -> str:
        basename = (title or UNTITLED).replace("/", "-")
        suffix: int | None = None
        while True:
            if suffix is None:
                candidate = f"{basename}.md"
                suffix = 0
            else:
                candidate = f"{basename}-{suffix}.md"
                suffix += 1
            if candidate not in self._used:
                break
        self._used.add(candidate)
        return candidate


class _ChunkSink:
    """Write-only file object collecting the bytes produced by `ZipFile`.

    It has no `tell` or `seek`, which makes `zipfile` write entries in
    streaming mode (sizes in data descriptors after each entry).
    """

    def __init__(self) -> None:
        self._chunks: list[bytes] = []

    def write(self, data: bytes) -> int:
        self._chunks.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        pass

    def drain(self) -> bytes:
        data = b"".join(self._chunks)
        self._chunks.clear()
        return data


def _zip_date_time(timestamp_ms: int | None) -> tuple[int, int, int, int, int, int]:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    date_time = tuple(time.localtime(timestamp_ms / 1000)[:6])
    return max(_MIN_DATE_TIME, min(date_time, _MAX_DATE_TIME))  # type: ignore[return-value]


class NoteArchive:
    """A zip archive of notes that can be read while it is being written."""

    def __init__(self, compression_level: int = DEFAULT_COMPRESSION_LEVEL) -> None:
        self._compression_level = compression_level
        self._sink = _ChunkSink()
        self._zip = zipfile.ZipFile(
            self._sink,  # type: ignore[arg-type]
            mode="w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=compression_level,
        )
        self._filenames = ExportFilenames()

    def add_note(self, note: NoteDO) -> str:
        """Append a note and return the name of its entry."""
        filename = self._filenames.claim(note.title)
        info = zipfile.ZipInfo(filename, date_time=_zip_date_time(note.last_change_time))
        info.external_attr = 0o644 << 16
        self._zip.writestr(
            info,
            (note.content or "").encode("utf-8"),
            compress_type=zipfile.ZIP_DEFLATED,
            compresslevel=self._compression_level,
        )
        return filename

    def finalize(self) -> None:
        """Write the central directory. No entries can be added afterwards."""
        self._zip.close()

    def read(self) -> bytes:
        """Bytes produced since the last call."""
        return self._sink.drain()


async def iter_note_archive(
    notes: Iterable[NoteDO],
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
) -> AsyncIterator[bytes]:
    """Yield a zip archive of the notes, one chunk per note plus a trailer.

    Compression runs in a worker thread. Notes are still added one at a
    time, so entry names are claimed in order.
    """
    archive = NoteArchive(compression_level)
    for note in notes:
        filename = await asyncio.to_thread(archive.add_note, note)
        logger.debug("Write: %s", filename)
        yield archive.read()
    await asyncio.to_thread(archive.finalize)
    yield archive.read()
