"""Reading documents from text files."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List

from lshdedup.exceptions import FileOperationError, InvalidFileError
from lshdedup.logging import get_logger
from lshdedup.types import FileIterator

logger = get_logger()

# Only the head of a file is inspected when deciding if it is text
SNIFF_SIZE = 8 * 1024


@dataclass
class Document:
    """A document and the key it is reported under."""

    key: str
    text: str


def is_valid_text(data: bytes, min_printable_ratio: float = 0.8) -> bool:
    """
    Check if raw content appears to be text.

    Args:
        data: Leading bytes of the content
        min_printable_ratio: Minimum ratio of printable characters (default 0.8)

    Returns:
        bool: True if content appears to be text
    """
    if not data:
        return True

    try:
        content = data.decode("utf-8")
    except UnicodeDecodeError as e:
        # A multi-byte character may straddle the sniff boundary, but only
        # a buffer filled to SNIFF_SIZE can have been cut there
        if len(data) != SNIFF_SIZE or e.start < len(data) - 3:
            return False
        content = data[: e.start].decode("utf-8")
        if not content:
            return True

    printable_chars = sum(1 for c in content if c.isprintable() or c.isspace())
    return printable_chars / len(content) >= min_printable_ratio


def collect_files(paths: List[str]) -> FileIterator:
    """Collect all files from given paths, directories in sorted order."""
    for path_str in paths:
        path = Path(path_str)
        if path.is_file():
            yield path
        elif path.is_dir():
            yield from sorted(p for p in path.rglob("*") if p.is_file())
        else:
            raise FileOperationError("No such file or directory", path_str, "read")


def read_text(path: Path, min_printable_ratio: float = 0.8) -> str:
    """Read a whole text file.

    Raises:
        FileOperationError: If the file cannot be read
        InvalidFileError: If the file does not look like text
    """
    try:
        data = path.read_bytes()
    except OSError as e:
        raise FileOperationError(
            f"Failed to read file: {e}", str(path), "read"
        ) from e

    if not is_valid_text(data[:SNIFF_SIZE], min_printable_ratio=min_printable_ratio):
        raise InvalidFileError(str(path), "content does not look like text")

    return data.decode("utf-8", errors="replace")


def read_documents(
    paths: List[str],
    per_line: bool = False,
    min_printable_ratio: float = 0.8,
) -> Iterator[Document]:
    """Yield documents from files, one per file or one per non-blank line.

    Files that are not text are skipped with a warning.
    """
    for path in collect_files(paths):
        try:
            text = read_text(path, min_printable_ratio=min_printable_ratio)
        except InvalidFileError as e:
            logger.warning_with_fields(
                "Skipping non-text file",
                operation="read_documents",
                path=str(path),
                reason=e.reason,
            )
            continue

        if not per_line:
            yield Document(key=str(path), text=text)
            continue

        for lineno, line in enumerate(text.splitlines(), 1):
            if line.strip():
                yield Document(key=f"{path}:{lineno}", text=line)
