"""Tests for script bundling and minification."""

import pytest
import rjsmin

from assetpipe.orchestrator.core import Pipeline
from assetpipe.orchestrator.errors import ManifestError, TaskFailedError
from assetpipe.orchestrator.graph import ENTRY_POINTS
from assetpipe.tasks.scripts import js_build

A_JS = "(function () {\n  // first\n  window.a = 1;\n})();\n"
B_JS = "var b = function (x) {\n  return x + 1;\n};"


class TestBundle:
    def test_concatenates_in_manifest_order(self, project):
        project.write("js/a.js", A_JS)
        project.write("js/b.js", B_JS)
        project.write("js/modules.yaml", "modules:\n  - js/b.js\n  - js/a.js\n")
        Pipeline(js_build, name="t").run(project.params)
        assert project.read("dist/js/mdb.js") == B_JS + A_JS

    def test_duplicates_are_kept(self, project):
        project.write("js/a.js", "a;")
        project.write("js/modules.yaml", "modules: [js/a.js, js/a.js]\n")
        Pipeline(js_build, name="t").run(project.params)
        assert project.read("dist/js/mdb.js") == "a;a;"

    def test_manifest_edits_picked_up_without_restart(self, project):
        project.write("js/a.js", A_JS)
        project.write("js/b.js", B_JS)
        manifest = project.write("js/modules.yaml", "modules:\n  - js/a.js\n")
        pipe = Pipeline(js_build, name="t")

        pipe.run(project.params)
        assert project.read("dist/js/mdb.js") == A_JS

        manifest.write_text("modules:\n  - js/a.js\n  - js/b.js\n", encoding="utf-8")
        pipe.run(project.params)
        assert project.read("dist/js/mdb.js") == A_JS + B_JS

    def test_manifest_path_configurable(self, project):
        project.params["paths"] = {"manifest": "build/order.yaml"}
        project.write("js/a.js", "a;")
        project.write("build/order.yaml", "- js/a.js\n")
        Pipeline(js_build, name="t").run(project.params)
        assert project.read("dist/js/mdb.js") == "a;"

    def test_absolute_manifest_entry_with_relative_root(self, project, monkeypatch):
        """Absolute script paths bundle fine when project.root is the cwd."""
        monkeypatch.chdir(project.root)
        project.params["project"]["root"] = "."
        a = project.write("js/a.js", "a;")
        project.write("js/b.js", "b;")
        project.write("js/modules.yaml", f"modules:\n  - '{a}'\n  - js/b.js\n")
        Pipeline(js_build, name="t").run(project.params)
        assert project.read("dist/js/mdb.js") == "a;b;"

    def test_missing_listed_file_fails(self, project):
        project.write("js/modules.yaml", "modules: [js/gone.js]\n")
        with pytest.raises(TaskFailedError) as exc:
            Pipeline(js_build, name="t").run(project.params)
        assert isinstance(exc.value.cause, FileNotFoundError)

    def test_invalid_manifest_fails(self, project):
        project.write("js/modules.yaml", "modules: nope\n")
        with pytest.raises(TaskFailedError) as exc:
            Pipeline(js_build, name="t").run(project.params)
        assert isinstance(exc.value.cause, ManifestError)


class TestScriptsEndToEnd:
    def test_bundle_then_minify(self, project):
        project.write("js/a.js", A_JS)
        project.write("js/b.js", B_JS)
        project.write("js/modules.yaml", "modules:\n  - js/a.js\n  - js/b.js\n")
        Pipeline(ENTRY_POINTS["js"], name="js").run(project.params)

        bundle = project.read("dist/js/mdb.js")
        assert bundle == A_JS + B_JS
        assert project.read("dist/js/mdb.min.js") == rjsmin.jsmin(bundle)
        assert project.files("dist/js") == ["mdb.js", "mdb.min.js"]
