import pytest

from corsy.models import INSECURE_ORIGIN_FINDING, REQUEST_FAILED, ScanResult


@pytest.fixture
def sample_results():
    """A vulnerable, a secure and a failed result, in that order."""
    return [
        ScanResult(
            url="http://vuln.test/api",
            cors_headers={
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": "GET, POST",
            },
            misconfigurations=[INSECURE_ORIGIN_FINDING],
        ),
        ScanResult(
            url="http://safe.test/",
            cors_headers={"Access-Control-Allow-Origin": "https://trusted.example.com"},
            misconfigurations=[],
        ),
        ScanResult(
            url="http://down.test/",
            cors_headers={},
            misconfigurations=[REQUEST_FAILED],
        ),
    ]


@pytest.fixture
def url_file(tmp_path):
    """Write a URL list file and return its path."""
    def _create(lines, filename="urls.txt", newline="\n"):
        path = tmp_path / filename
        path.write_bytes(newline.join(lines).encode("utf-8") + newline.encode("utf-8"))
        return path

    return _create
