"""Exception hierarchy for depup."""

from pathlib import Path


class DepupError(Exception):
    """Base class for every error raised by depup."""


# Manifest errors


class ManifestError(DepupError):
    """A manifest could not be read, parsed or rewritten."""


class ManifestNotFound(ManifestError):
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"manifest file not found: {path}")


class ManifestReadError(ManifestError):
    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"failed to read manifest {path}: {reason}")


class ManifestWriteError(ManifestError):
    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"failed to write manifest {path}: {reason}")


class JsonParseError(ManifestError):
    def __init__(self, path: Path | str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"failed to parse JSON in {path}: {reason}")


class TomlParseError(ManifestError):
    def __init__(self, path: Path | str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"failed to parse TOML in {path}: {reason}")


class GoModParseError(ManifestError):
    def __init__(self, path: Path | str, line: int, message: str):
        self.path = path
        self.line = line
        self.message = message
        super().__init__(f"failed to parse go.mod at {path}:{line}: {message}")


class InvalidVersionSpec(ManifestError):
    def __init__(self, package: str, spec: str):
        self.package = package
        self.spec = spec
        super().__init__(f"invalid version spec for {package}: {spec}")


class UnsupportedFormat(ManifestError):
    def __init__(self, path: Path | str):
        self.path = path
        super().__init__(f"unsupported manifest format: {path}")


# Registry errors


class RegistryError(DepupError):
    """A registry lookup failed.

    Every subclass records the package and the registry display name so
    callers can report the failure without knowing which adapter raised it.
    """

    def __init__(self, package: str, registry: str, message: str):
        self.package = package
        self.registry = registry
        super().__init__(message)


class PackageNotFound(RegistryError):
    def __init__(self, package: str, registry: str):
        super().__init__(package, registry, f"package '{package}' not found in {registry} registry")


class NetworkError(RegistryError):
    def __init__(self, package: str, registry: str, message: str):
        self.message = message
        super().__init__(
            package, registry, f"network error fetching {package} from {registry}: {message}"
        )


class RateLimitExceeded(RegistryError):
    def __init__(self, package: str, registry: str):
        super().__init__(package, registry, f"rate limit exceeded for {registry}")


class InvalidResponse(RegistryError):
    def __init__(self, package: str, registry: str, message: str):
        self.message = message
        super().__init__(
            package, registry, f"invalid response from {registry} for {package}: {message}"
        )


class RegistryTimeout(RegistryError):
    def __init__(self, package: str, registry: str):
        super().__init__(
            package, registry, f"request timed out fetching {package} from {registry}"
        )


class AuthenticationError(RegistryError):
    def __init__(self, package: str, registry: str):
        super().__init__(package, registry, f"authentication failed for {registry}")


class InvalidPackageName(RegistryError):
    def __init__(self, package: str, registry: str, message: str):
        self.message = message
        super().__init__(
            package, registry, f"invalid package name '{package}' for {registry}: {message}"
        )


# Configuration errors


class ConfigError(DepupError):
    """Invalid command line or run configuration."""


class InvalidDuration(ConfigError):
    def __init__(self, value: str):
        self.value = value
        super().__init__(f"invalid duration format: {value} (expected e.g. 7d, 2w, 1m)")


class InvalidLanguageFilter(ConfigError):
    def __init__(self, value: str):
        self.value = value
        super().__init__(f"invalid language filter: {value}")


class InvalidPath(ConfigError):
    def __init__(self, path: Path | str):
        self.path = path
        super().__init__(f"invalid path: {path}")


class ConflictingOptions(ConfigError):
    def __init__(self, message: str):
        super().__init__(f"conflicting options: {message}")


# Filesystem errors


class DepupIOError(DepupError):
    """Filesystem access failed outside of manifest handling."""


class DirectoryNotFound(DepupIOError):
    def __init__(self, path: Path | str):
        self.path = path
        super().__init__(f"directory not found: {path}")


class PermissionDenied(DepupIOError):
    def __init__(self, path: Path | str):
        self.path = path
        super().__init__(f"permission denied: {path}")


class GenericIOError(DepupIOError):
    def __init__(self, message: str):
        super().__init__(f"I/O error: {message}")
