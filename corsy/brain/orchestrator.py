"""Scan orchestrator - drives targets, probe and reporters."""

import logging
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from corsy.brain.targets import load_urls
from corsy.litterbox.reporter import ConsoleReporter, JsonReporter
from corsy.models import ScanResult
from corsy.paws.probe import CorsProbe
from corsy.utils.config import ScanConfig

logger = logging.getLogger(__name__)


class Orchestrator:
    """Run one scan: collect URLs, probe each once, report the results."""

    def __init__(
        self,
        config: ScanConfig,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ) -> None:
        self.config = config
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)

    async def run(self) -> List[ScanResult]:
        """Execute the scan.

        Raises:
            TargetSourceError: If no URL could be collected
        """
        urls = load_urls(self.config.url, self.config.input_file)
        logger.info("Scanning %d URL(s) with origin %s", len(urls), self.config.origin)

        results = await self.scan(urls)
        self.report(results)
        return results

    async def scan(self, urls: List[str]) -> List[ScanResult]:
        async with CorsProbe(
            timeout=self.config.timeout,
            origin=self.config.origin,
            concurrency=self.config.concurrency,
            enable_logging=bool(self.config.log_file),
            log_file=self.config.log_file,
            on_scan=self._announce,
        ) as probe:
            return await probe.scan_all(urls)

    def report(self, results: List[ScanResult]) -> None:
        if self.config.output_file:
            reporter = JsonReporter(self.config.output_file)
            path = reporter.write(results)
            if path is None:
                self.err_console.print(f"[red]{escape(reporter.error or 'Failed to save results')}[/red]")
            else:
                self.console.print(f"Results saved to file: {escape(str(path))}", highlight=False)
        else:
            ConsoleReporter(self.console).render(results)

    def _announce(self, url: str) -> None:
        self.console.print(f"Scanning URL: {url}", markup=False, highlight=False)
