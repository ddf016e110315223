"""Test that project structure is correct and modules can be imported."""

import depup.client
import depup.detect
import depup.manifests
import depup.models
import depup.orchestrator
import depup.registries
from depup.models import Dependency, Language, VersionSpec, VersionSpecKind


def test_core_modules_importable():
    """Ensure core modules can be imported."""
    assert hasattr(depup.models, "UpdateSummary")
    assert hasattr(depup.detect, "detect_manifests")
    assert hasattr(depup.manifests, "ManifestWriter")
    assert hasattr(depup.registries, "get_adapter")
    assert hasattr(depup.client, "HttpClient")
    assert hasattr(depup.orchestrator, "Orchestrator")


def test_model_creation():
    """Test that basic models can be instantiated."""
    spec = VersionSpec(VersionSpecKind.CARET, "^1.2.3", "1.2.3", prefix="^")
    dependency = Dependency("express", spec, False, Language.NODE)

    assert dependency.version == "1.2.3"
    assert spec.format_updated("1.3.0") == "^1.3.0"
    assert not dependency.is_pinned()
