"""Unit tests for the script manifest loader."""

import pytest

from assetpipe.orchestrator.errors import ManifestError
from assetpipe.orchestrator.manifest import load_manifest


class TestLoadManifest:
    def test_modules_mapping(self, project):
        path = project.write("js/modules.yaml", "modules:\n  - js/b.js\n  - js/a.js\n")
        assert load_manifest(path).modules == ["js/b.js", "js/a.js"]

    def test_bare_list(self, project):
        path = project.write("js/modules.yaml", "- js/a.js\n")
        assert load_manifest(path).modules == ["js/a.js"]

    def test_empty_file_is_empty_manifest(self, project):
        path = project.write("js/modules.yaml", "")
        assert load_manifest(path).modules == []

    def test_reads_fresh_each_call(self, project):
        path = project.write("js/modules.yaml", "modules: [js/a.js]\n")
        assert load_manifest(path).modules == ["js/a.js"]
        path.write_text("modules: [js/a.js, js/b.js]\n", encoding="utf-8")
        assert load_manifest(path).modules == ["js/a.js", "js/b.js"]

    def test_mapping_without_modules_key(self, project):
        path = project.write("js/modules.yaml", "scripts: [js/a.js]\n")
        with pytest.raises(ManifestError, match="no 'modules'"):
            load_manifest(path)

    def test_non_string_entries(self, project):
        path = project.write("js/modules.yaml", "modules:\n  - 1\n")
        with pytest.raises(ManifestError, match="strings"):
            load_manifest(path)

    def test_missing_file(self, project):
        with pytest.raises(FileNotFoundError):
            load_manifest(project.root / "js/modules.yaml")
