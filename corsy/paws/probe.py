"""CORS Probe - Async HTTP client sending forged-origin requests."""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, List, Optional

import httpx

from corsy import __version__
from corsy.brain.cors import DEFAULT_ORIGIN, analyze_cors, canonical_header_name
from corsy.models import REQUEST_CREATION_FAILED, REQUEST_FAILED, ScanResult

logger = logging.getLogger(__name__)

CORS_HEADER_MARKER = "access-control"


def extract_cors_headers(headers: httpx.Headers) -> Dict[str, str]:
    """Collect every ``access-control`` header from a response.

    Names are canonicalized and repeated headers are joined with ``", "``
    in the order they were received.
    """
    collected: Dict[str, List[str]] = {}
    for name, value in headers.multi_items():
        if CORS_HEADER_MARKER in name.lower():
            collected.setdefault(canonical_header_name(name), []).append(value)
    return {name: ", ".join(values) for name, values in collected.items()}


class CorsProbe:
    """Async prober for CORS misconfigurations.

    Features:
    - One GET per URL with a forged ``Origin`` header
    - Redirects followed, headers evaluated on the final response
    - Per-request timeout
    - Optional bounded concurrency, results kept in input order
    - Optional request/response traffic log
    """

    def __init__(
        self,
        timeout: int = 10,
        origin: str = DEFAULT_ORIGIN,
        concurrency: int = 1,
        enable_logging: bool = False,
        log_file: Optional[str] = None,
        on_scan: Optional[Callable[[str], Any]] = None,
    ) -> None:
        """Initialize the probe.

        Args:
            timeout: Request timeout in seconds
            origin: Origin header value sent with every request
            concurrency: Maximum number of requests in flight
            enable_logging: Enable request/response logging
            log_file: Optional file path to save logs
            on_scan: Called with each URL right before it is probed

        Raises:
            ValueError: If timeout or concurrency is not positive.
        """
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")

        self.timeout = timeout
        self.origin = origin
        self.concurrency = concurrency
        self.enable_logging = enable_logging
        self.log_file = log_file
        self.on_scan = on_scan

        self._client: Optional[httpx.AsyncClient] = None
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._file_handler: Optional[logging.FileHandler] = None

        self._setup_logging()

    async def __aenter__(self) -> "CorsProbe":
        """Context manager entry."""
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": f"corsy/{__version__}"},
        )
        self._semaphore = asyncio.Semaphore(self.concurrency)
        self._open_log_file()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Context manager exit."""
        if self._client:
            await self._client.aclose()
            self._client = None

        if self._file_handler:
            self._file_handler.close()
            self._logger.removeHandler(self._file_handler)
            self._logger.propagate = True
            self._file_handler = None

    async def scan_all(self, urls: List[str]) -> List[ScanResult]:
        """Probe every URL and return the results in input order."""
        return list(await asyncio.gather(*(self._scan_limited(url) for url in urls)))

    async def _scan_limited(self, url: str) -> ScanResult:
        if not self._semaphore:
            return await self.scan(url)
        async with self._semaphore:
            return await self.scan(url)

    async def scan(self, url: str) -> ScanResult:
        """Probe a single URL.

        Request errors never propagate; they are reported as a marker in
        ``misconfigurations`` with no CORS headers.
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with CorsProbe(...)' pattern.")

        if self.on_scan:
            self.on_scan(url)

        try:
            request = self._client.build_request("GET", url, headers={"Origin": self.origin})
        except (httpx.InvalidURL, ValueError) as e:
            # IDNA and encoding errors surface as plain ValueError subclasses
            logger.warning("Error creating request for URL %s: %s", url, e)
            self._log_response(url, status_code=0, elapsed_ms=0.0, error=f"Invalid URL: {e}")
            return ScanResult(url=url, misconfigurations=[REQUEST_CREATION_FAILED])

        self._log_request(request)
        start_time = time.perf_counter()

        try:
            # httpx timeouts apply per phase and per hop; bound the whole exchange
            response = await asyncio.wait_for(
                self._client.send(request, stream=True),
                timeout=self.timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL, asyncio.TimeoutError) as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.warning("Error making request to URL %s: %s", url, e)
            self._log_response(url, status_code=0, elapsed_ms=elapsed_ms, error=f"{type(e).__name__}: {e}")
            return ScanResult(url=url, misconfigurations=[REQUEST_FAILED])

        try:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            cors_headers = extract_cors_headers(response.headers)
            self._log_response(
                str(response.url),
                status_code=response.status_code,
                elapsed_ms=elapsed_ms,
                cors_headers=cors_headers,
            )
        finally:
            await response.aclose()

        return ScanResult(
            url=url,
            cors_headers=cors_headers,
            misconfigurations=analyze_cors(cors_headers, origin=self.origin),
        )

    def _setup_logging(self) -> None:
        """Setup request/response logging."""
        self._logger = logging.getLogger(f"{__name__}.traffic")
        self._logger.setLevel(logging.INFO)

        # Keep httpx from logging every request on its own
        logging.getLogger("httpx").setLevel(logging.WARNING)

    def _open_log_file(self) -> None:
        """Attach the traffic log file; records go only to that file."""
        if not (self.enable_logging and self.log_file) or self._file_handler:
            return

        formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s'
        )
        self._file_handler = logging.FileHandler(self.log_file)
        self._file_handler.setFormatter(formatter)
        self._logger.addHandler(self._file_handler)
        self._logger.propagate = False

    def _log_request(self, request: httpx.Request) -> None:
        """Log outgoing request."""
        if not self.enable_logging:
            return

        self._logger.info(
            f"REQUEST: {request.method} {request.url}\n"
            f"Origin: {request.headers.get('Origin')}"
        )

    def _log_response(
        self,
        url: str,
        status_code: int,
        elapsed_ms: float,
        cors_headers: Optional[Dict[str, str]] = None,
        error: Optional[str] = None,
    ) -> None:
        """Log incoming response."""
        if not self.enable_logging:
            return

        if error:
            self._logger.error(f"RESPONSE ERROR {url} (Time: {elapsed_ms:.2f}ms): {error}")
        else:
            self._logger.info(
                f"RESPONSE {url} (Time: {elapsed_ms:.2f}ms): Status: {status_code}\n"
                f"CORS Headers: {cors_headers}"
            )
