"""
Streaming ZIP archive assembly.

Artifacts are appended as soon as each page is exported. The archive is
written through a non-seekable writer, so zipfile emits a data descriptor
after each entry instead of seeking back to patch its header; every byte is
final once written and a reader may stream the file while it grows.
"""

import os
import threading
import zipfile
from typing import BinaryIO, Iterator, List, Set

from ..errors import ArchiveClosedError, ArchiveWriteError
from ..utils.log import get_logger
from ..utils.constants import ARCHIVE_COMPRESS_LEVEL, STREAM_CHUNK_SIZE


class SpoolWriter:
    """
    Append-only, non-seekable file writer.

    Deliberately has no seek() so zipfile treats it as a stream. Every write
    is flushed so concurrent readers see complete data.
    """

    def __init__(self, path: str):
        self.path = path
        self._fh = open(path, "wb")
        self._position = 0

    def write(self, data: bytes) -> int:
        written = self._fh.write(data)
        self._fh.flush()
        self._position += written
        return written

    def tell(self) -> int:
        return self._position

    def flush(self) -> None:
        self._fh.flush()

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()

    @property
    def closed(self) -> bool:
        return self._fh.closed


class ArchiveStreamer:
    """
    Append-only ZIP writer for one export job.
    """

    def __init__(self, output: BinaryIO, compresslevel: int = ARCHIVE_COMPRESS_LEVEL):
        """
        Initialize the archive streamer.

        Args:
            output: Writable binary stream receiving the archive bytes
            compresslevel: DEFLATE level
        """
        self.output = output
        self.logger = get_logger("archive")
        self.names: List[str] = []
        self._name_set: Set[str] = set()
        self._finalized = False

        try:
            self._zip = zipfile.ZipFile(
                output,
                mode="w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=compresslevel,
            )
        except OSError as e:
            raise ArchiveWriteError(f"Cannot open archive: {e}") from e

    @property
    def finalized(self) -> bool:
        return self._finalized

    def append(self, name: str, data: bytes) -> None:
        """
        Add one entry to the archive.

        Raises:
            ArchiveClosedError: If the archive was already finalized
            ArchiveWriteError: On a duplicate name or an I/O failure
        """
        if self._finalized:
            raise ArchiveClosedError(f"Archive is finalized; cannot add {name}")
        if name in self._name_set:
            raise ArchiveWriteError(f"Duplicate archive entry: {name}")

        try:
            self._zip.writestr(name, data)
        except (OSError, ValueError) as e:
            raise ArchiveWriteError(f"Failed to write {name}: {e}") from e

        self.names.append(name)
        self._name_set.add(name)
        self.logger.debug(f"Archived {name} ({len(data)} bytes)")

    def finalize(self) -> None:
        """
        Write the central directory and close the archive.

        Raises:
            ArchiveClosedError: If called more than once
            ArchiveWriteError: On an I/O failure
        """
        if self._finalized:
            raise ArchiveClosedError("Archive already finalized")
        self._finalized = True

        try:
            self._zip.close()
        except (OSError, ValueError) as e:
            raise ArchiveWriteError(f"Failed to finalize archive: {e}") from e

        self.logger.info(f"Archive finalized with {len(self.names)} entries")


def iter_spool(
    path: str,
    done: threading.Event,
    chunk_size: int = STREAM_CHUNK_SIZE,
    poll_interval: float = 0.2
) -> Iterator[bytes]:
    """
    Stream a growing file until its writer signals completion.

    Args:
        path: File being written by the job
        done: Set by the job once the file is complete
        chunk_size: Maximum bytes per yielded chunk
        poll_interval: Seconds to wait for new data

    Yields:
        Chunks of the file in order
    """
    while not os.path.exists(path):
        if done.is_set():
            return
        done.wait(poll_interval)

    with open(path, "rb") as fh:
        while True:
            # Read the flag before reading data so the final bytes are not missed
            finished = done.is_set()
            chunk = fh.read(chunk_size)
            if chunk:
                yield chunk
                continue
            if finished:
                return
            done.wait(poll_interval)
