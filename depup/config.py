"""Runtime constants for depup."""

from typing import Final

VERSION: Final[str] = "0.1.0"
USER_AGENT: Final[str] = f"depup/{VERSION}"

DEFAULT_TIMEOUT: Final[float] = 30.0
MAX_RETRIES: Final[int] = 3
RETRY_BACKOFF_BASE: Final[float] = 0.1

DEFAULT_CONCURRENCY: Final[int] = 10
CRATES_IO_CONCURRENCY: Final[int] = 1
CRATES_IO_MIN_INTERVAL: Final[float] = 1.0

NPM_REGISTRY_URL: Final[str] = "https://registry.npmjs.org"
PYPI_URL: Final[str] = "https://pypi.org/pypi"
CRATES_IO_URL: Final[str] = "https://crates.io/api/v1/crates"
GO_PROXY_URL: Final[str] = "https://proxy.golang.org"
RUBYGEMS_URL: Final[str] = "https://rubygems.org/api/v1/versions"
PACKAGIST_URL: Final[str] = "https://repo.packagist.org/p2"
MAVEN_CENTRAL_URL: Final[str] = "https://search.maven.org/solrsearch/select"
