"""
Dump Directory Storage Implementation

DESIGN DECISION: A snapshot is a plain directory holding one text file per
section (accounts.dump, payments.dump, favorites.dump) because:
1. The files can be inspected and edited by hand
2. No database setup required
3. Copying a directory is a complete backup

TRADEOFFS:
- No atomic replace: a crash mid-export can leave a half-written file
- No locking: callers must serialize export/import themselves

File handles are always closed. A failure while closing is logged and
does not turn a completed read or write into an error.
"""

import os
import shutil
from contextlib import contextmanager
from functools import partial
from pathlib import Path
from typing import IO, Iterator, Optional, Union

import structlog
from tenacity import (
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from wallet.config import get_settings
from wallet.services.storage.interface import (
    SnapshotFormatError,
    SnapshotIOError,
    SnapshotNotFoundError,
    SnapshotSection,
    SnapshotStorageInterface,
)


logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]

# Errors that will not go away by trying again
_PERMANENT_OS_ERRORS = (
    FileNotFoundError,
    FileExistsError,
    IsADirectoryError,
    NotADirectoryError,
    PermissionError,
)


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, OSError) and not isinstance(exc, _PERMANENT_OS_ERRORS)


@contextmanager
def _open_file(path: Path, mode: str, **kwargs) -> Iterator[IO]:
    """Open a file and close it on every exit path, logging close failures."""
    handle = open(path, mode, **kwargs)
    try:
        yield handle
    finally:
        try:
            handle.close()
        except OSError as e:
            logger.warning("snapshot_close_failed", path=str(path), error=str(e))


class FileSnapshotStorage(SnapshotStorageInterface):
    """
    Stores snapshot sections as files in an existing directory.

    The directory is never created here; exporting into a missing
    directory is an error.
    """

    def __init__(
        self,
        directory: PathLike,
        read_chunk_size: Optional[int] = None,
        retry_attempts: Optional[int] = None,
    ):
        settings = get_settings().ledger
        self._directory = Path(directory)
        self._chunk_size = read_chunk_size or settings.read_chunk_size
        self._retrying = Retrying(
            stop=stop_after_attempt(retry_attempts or settings.io_retry_attempts),
            wait=wait_exponential(multiplier=0.05, max=1),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        )

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, section: SnapshotSection) -> Path:
        """Location of a section's dump file."""
        return self._directory / section.filename

    def write_section(self, section: SnapshotSection, text: str) -> None:
        self.write_text(self.path_for(section), text)

    def read_section(self, section: SnapshotSection) -> str:
        return self.read_text(self.path_for(section))

    def has_section(self, section: SnapshotSection) -> bool:
        return self.path_for(section).is_file()

    def write_text(self, path: PathLike, text: str) -> None:
        """
        Replace a file's content with text.

        Raises:
            SnapshotIOError: If the file cannot be created or written
        """
        path = Path(path)
        try:
            self._retrying(self._write_text, path, text)
        except OSError as e:
            logger.error("snapshot_write_failed", path=str(path), error=str(e))
            raise SnapshotIOError(f"Failed to write {path}: {e}", path=str(path)) from e
        logger.debug("snapshot_file_written", path=str(path), size=len(text))

    def read_text(self, path: PathLike) -> str:
        """
        Read a whole file, chunk by chunk.

        Raises:
            SnapshotNotFoundError: If the file does not exist
            SnapshotIOError: If the file cannot be read
        """
        path = Path(path)
        try:
            text = self._retrying(self._read_text, path)
        except FileNotFoundError as e:
            raise SnapshotNotFoundError(f"Snapshot file not found: {path}", path=str(path)) from e
        except OSError as e:
            logger.error("snapshot_read_failed", path=str(path), error=str(e))
            raise SnapshotIOError(f"Failed to read {path}: {e}", path=str(path)) from e
        except UnicodeDecodeError as e:
            raise SnapshotFormatError(f"{path} is not valid UTF-8 text: {e}") from e
        logger.debug("snapshot_file_read", path=str(path), size=len(text))
        return text

    def _write_text(self, path: Path, text: str) -> None:
        with _open_file(path, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)
            # Surface write errors here rather than at close
            handle.flush()

    def _read_text(self, path: Path) -> str:
        chunks = []
        with _open_file(path, "r", encoding="utf-8", newline="") as handle:
            for chunk in iter(partial(handle.read, self._chunk_size), ""):
                chunks.append(chunk)
        return "".join(chunks)


def copy_file(source: PathLike, destination: PathLike) -> int:
    """
    Copy a file byte for byte and verify the copy is complete.

    Returns:
        Number of bytes copied

    Raises:
        SnapshotIOError: If either file cannot be opened, or the number of
            bytes written differs from the source size
    """
    source = Path(source)
    destination = Path(destination)
    try:
        with _open_file(source, "rb") as src:
            expected = os.fstat(src.fileno()).st_size
            with _open_file(destination, "wb") as dst:
                shutil.copyfileobj(src, dst)
                dst.flush()
                written = dst.tell()
    except OSError as e:
        raise SnapshotIOError(
            f"Failed to copy {source} to {destination}: {e}", path=str(source)
        ) from e

    if written != expected:
        raise SnapshotIOError(
            f"Copied size: {written}, original size: {expected}", path=str(source)
        )
    return written
