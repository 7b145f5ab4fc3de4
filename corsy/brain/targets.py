"""Target URL collection."""

import logging
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)


class TargetSourceError(Exception):
    """Raised when the list of target URLs cannot be built."""


def _read_lines(path: Path) -> List[str]:
    lines = []
    with open(path, "r", encoding="utf-8", newline="") as f:
        for line in f:
            if line.endswith("\n"):
                line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]
            lines.append(line)
    return lines


def load_urls(
    url: Optional[str] = None,
    input_file: Optional[Union[str, Path]] = None,
) -> List[str]:
    """Collect the URLs to scan.

    The single ``url`` comes first, followed by every line of ``input_file``
    in file order. Duplicates and blank lines are kept as-is.

    Args:
        url: Single URL to scan
        input_file: Path to a newline-delimited list of URLs

    Returns:
        Ordered list of URLs

    Raises:
        TargetSourceError: If the file cannot be opened or read, or if no
            URL was collected at all
    """
    urls: List[str] = []

    if url:
        urls.append(url)

    if input_file:
        path = Path(input_file)
        try:
            lines = _read_lines(path)
        except UnicodeDecodeError as e:
            raise TargetSourceError(f"Error reading file: {path}: {e}") from e
        except OSError as e:
            raise TargetSourceError(f"Error opening file: {e}") from e
        logger.debug("Loaded %d URL(s) from %s", len(lines), path)
        urls.extend(lines)

    if not urls:
        raise TargetSourceError("No URLs provided. Use -u or -i flag.")

    return urls
