"""Scan result reporters."""

import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from rich.console import Console

from corsy.models import ScanResult

logger = logging.getLogger(__name__)

SEPARATOR = "-------------------------------------------------"


class ConsoleReporter:
    """Print scan results to the terminal.

    Vulnerable URLs are rendered in red, secure ones in green. Result text is
    printed literally, without rich markup or highlighting.
    """

    STYLES = {True: "red", False: "green"}

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def render(self, results: List[ScanResult]) -> None:
        for result in results:
            self._render_result(result)
            self.console.print(SEPARATOR, markup=False, highlight=False)

    def _render_result(self, result: ScanResult) -> None:
        style = self.STYLES[result.vulnerable]
        if result.vulnerable:
            self._line(f"[!] VULNERABLE: {result.url}", style)
        else:
            self._line(f"[+] SECURE: {result.url}", style)

        if result.cors_headers:
            self._line("CORS Headers:", style)
            for name, value in result.cors_headers.items():
                self._line(f"  {name}: {value}", style)
        else:
            self._line("CORS Headers: none", style)

        if result.vulnerable:
            self._line("Misconfigurations:", style)
            for finding in result.misconfigurations:
                self._line(f"  - {finding}", style)

    def _line(self, text: str, style: str) -> None:
        self.console.print(text, style=style, markup=False, highlight=False)


class JsonReporter:
    """Write scan results to a JSON file."""

    def __init__(self, output_path: Union[str, Path], indent: int = 2) -> None:
        """Initialize the reporter.

        Args:
            output_path: File to write, replaced if it already exists
            indent: JSON indentation
        """
        self.output_path = Path(output_path)
        self.indent = indent
        self.error: Optional[str] = None

    def render(self, results: List[ScanResult]) -> str:
        return json.dumps([r.to_dict() for r in results], indent=self.indent, ensure_ascii=False)

    def write(self, results: List[ScanResult]) -> Optional[Path]:
        """Serialize ``results`` and write them in one go.

        Failures are kept in ``error`` and logged, never raised.

        Returns:
            Path to the written file, or None if nothing was written
        """
        self.error = None
        try:
            content = self.render(results)
        except (TypeError, ValueError) as e:
            self.error = f"Error marshaling results to JSON: {e}"
            logger.debug(self.error)
            return None

        temp_path = self.output_path.with_name(f".{self.output_path.name}.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            temp_path.replace(self.output_path)
        except OSError as e:
            self.error = f"Error writing to file: {e}"
            logger.debug("Failed to write %s", self.output_path, exc_info=True)
            if temp_path.exists():
                temp_path.unlink()
            return None

        return self.output_path


def load_results(path: Union[str, Path]) -> List[ScanResult]:
    """Load results previously written by JsonReporter.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a JSON list of results
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError("Results file must contain a JSON array")

    try:
        return [ScanResult.from_dict(item) for item in data]
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed result entry: {e}") from e
