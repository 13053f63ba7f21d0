"""Tests for SCSS compilation and CSS minification tasks."""

import logging

import pytest
import rcssmin

from assetpipe.orchestrator.core import Pipeline
from assetpipe.orchestrator.errors import StyleCompileError, TaskFailedError
from assetpipe.orchestrator.graph import ENTRY_POINTS, styles_minify
from assetpipe.tasks.styles import css_compile, css_compile_modules, css_minify

SITE = """
$brand: #4285f4;
.card {
  color: $brand;
  .title { margin: 0 auto; }
}
"""

BUTTONS = """
.btn {
  padding: 4px 8px;
  transition: all 0.2s;
}
"""


class TestCompile:
    def test_main_stylesheets(self, project):
        project.write("scss/site.scss", SITE)
        Pipeline(css_compile, name="t").run(project.params)
        css = project.read("dist/css/site.css")
        assert "color: #4285f4" in css
        assert ".card .title" in css

    def test_partials_are_not_emitted(self, project):
        project.write("scss/_variables.scss", "$brand: red;\n")
        project.write("scss/site.scss", '@import "variables";\n.a { color: $brand; }\n')
        Pipeline(css_compile, name="t").run(project.params)
        assert project.files("dist/css") == ["site.css"]
        assert "color: red" in project.read("dist/css/site.css")

    def test_output_is_prefixed(self, project):
        project.write("scss/modules/buttons.scss", BUTTONS)
        Pipeline(css_compile_modules, name="t").run(project.params)
        assert "-webkit-transition: all 0.2s;" in project.read("dist/css/modules/buttons.css")

    def test_modules_land_under_css_modules(self, project):
        project.write("scss/components/modules/buttons.scss", BUTTONS)
        project.write("scss/modules/forms/inputs.scss", ".input { border: 0; }\n")
        Pipeline(css_compile_modules, name="t").run(project.params)
        assert project.files("dist") == ["css/modules/buttons.css", "css/modules/inputs.css"]

    def test_main_variant_ignores_module_sources(self, project):
        project.write("scss/modules/buttons.scss", BUTTONS)
        Pipeline(css_compile, name="t").run(project.params)
        assert project.files("dist") == []

    def test_syntax_error_fails_task_but_compiles_the_rest(self, project, caplog):
        project.write("scss/broken.scss", ".a { color: red\n")
        project.write("scss/ok.scss", ".b { color: blue; }\n")
        with caplog.at_level(logging.ERROR):
            with pytest.raises(TaskFailedError) as exc:
                Pipeline(css_compile, name="t").run(project.params)
        assert isinstance(exc.value.cause, StyleCompileError)
        assert any("broken.scss" in key for key in exc.value.cause.failures)
        assert project.files("dist/css") == ["ok.css"]
        assert "broken.scss" in caplog.text


class TestMinify:
    def test_writes_min_sibling(self, project):
        project.write("dist/css/site.css", ".a {\n  color: red; }\n")
        Pipeline(css_minify, name="t").run(project.params)
        source = project.read("dist/css/site.css")
        assert source == ".a {\n  color: red; }\n"
        assert project.read("dist/css/site.min.css") == rcssmin.cssmin(source)

    def test_skips_min_and_vendor_files(self, project):
        project.write("dist/css/site.css", ".a { color: red; }")
        project.write("dist/css/site.min.css", "old")
        project.write("dist/css/bootstrap.css", ".b { color: blue; }")
        Pipeline(css_minify, name="t").run(project.params)
        assert project.files("dist/css") == ["bootstrap.css", "site.css", "site.min.css"]
        assert project.read("dist/css/site.min.css") == rcssmin.cssmin(".a { color: red; }")

    def test_vendor_files_configurable(self, project):
        project.params["styles"] = {"vendor_files": ["vendor.css"]}
        project.write("dist/css/bootstrap.css", ".b { color: blue; }")
        project.write("dist/css/vendor.css", ".v { color: blue; }")
        Pipeline(css_minify, name="t").run(project.params)
        assert "bootstrap.min.css" in project.files("dist/css")
        assert "vendor.min.css" not in project.files("dist/css")

    def test_both_variants(self, project):
        project.write("dist/css/site.css", ".a { color: red; }")
        project.write("dist/css/modules/buttons.css", ".btn { color: red; }")
        Pipeline(styles_minify, name="t").run(project.params)
        assert project.files("dist/css") == [
            "modules/buttons.css",
            "modules/buttons.min.css",
            "site.css",
            "site.min.css",
        ]


class TestStylesEndToEnd:
    def test_full_style_task_produces_four_files(self, project):
        project.write("scss/site.scss", SITE)
        project.write("scss/components/modules/buttons.scss", BUTTONS)
        Pipeline(ENTRY_POINTS["css"], name="css").run(project.params)

        assert project.files("dist") == [
            "css/modules/buttons.css",
            "css/modules/buttons.min.css",
            "css/site.css",
            "css/site.min.css",
        ]
        for base in ["css/site", "css/modules/buttons"]:
            compiled = project.read(f"dist/{base}.css")
            minified = project.read(f"dist/{base}.min.css")
            assert minified == rcssmin.cssmin(compiled)
            assert len(minified) < len(compiled)
