"""Tests for overlay drafting, template lookup and merging."""

import tempfile
from pathlib import Path

import pytest

from conftest import DRAFT_OUTPUT, PACKAGE_ID, FakeHpc
from hpc_badge.errors import MissingTemplateError, PackageResolutionError, ToolError
from hpc_badge.overlay import (
    generate_draft,
    merge_overlay,
    qualify_modules,
    resolve_template,
    strip_module_prefixes,
)
from hpc_badge.package import FixedPackageResolver


class FailingResolver:
    def package_identifier(self):
        raise PackageResolutionError("no build")


class TestStripModulePrefixes:
    def test_strips_build_prefix(self):
        text = 'module "my-lib-0.1.0.0-A1b2C3:Data.Stack" {\n'
        assert strip_module_prefixes(text) == 'module "Data.Stack" {\n'

    def test_strips_up_to_last_colon_on_the_line(self):
        text = 'module "main:my-lib-0.1-X:Data.Stack" {'
        assert strip_module_prefixes(text) == 'module "Data.Stack" {'

    def test_works_line_by_line(self):
        stripped = strip_module_prefixes(DRAFT_OUTPUT)

        assert 'module "Data.Stack" {' in stripped
        assert 'module "Data.Queue" {' in stripped
        assert PACKAGE_ID not in stripped
        assert 'tick function "pop" [] ;' in stripped

    def test_bare_names_untouched(self):
        text = 'module "Data.Stack" {\n}\n'
        assert strip_module_prefixes(text) == text


class TestQualifyModules:
    def test_prefixes_every_module(self):
        text = 'module "Data.Stack" {\n}\nmodule "Data.Queue" {\n}\n'
        qualified = qualify_modules(text, PACKAGE_ID)

        assert f'module "{PACKAGE_ID}/Data.Stack"' in qualified
        assert f'module "{PACKAGE_ID}/Data.Queue"' in qualified

    def test_leaves_other_directives(self):
        text = 'tick function "push" [] ;\n'
        assert qualify_modules(text, PACKAGE_ID) == text


class TestGenerateDraft:
    def test_creates_workdir_and_writes_bare_names(self, tmp_path):
        dest = tmp_path / "work" / "draft.overlay"

        generate_draft(FakeHpc(), tmp_path, tmp_path, tmp_path / "custom.tix", dest)

        assert dest.parent.is_dir()
        assert dest.read_text() == strip_module_prefixes(DRAFT_OUTPUT)

    def test_regenerating_is_identical(self, tmp_path):
        dest = tmp_path / "draft.overlay"
        hpc = FakeHpc()

        generate_draft(hpc, tmp_path, tmp_path, tmp_path / "custom.tix", dest)
        first = dest.read_text()
        generate_draft(hpc, tmp_path, tmp_path, tmp_path / "custom.tix", dest)

        assert dest.read_text() == first


class TestResolveTemplate:
    def test_existing_template(self, tmp_path):
        path = tmp_path / "template.overlay"
        path.write_text("")
        assert resolve_template(path) == path

    def test_missing_template_message(self, tmp_path):
        path = tmp_path / "template.overlay"
        draft = tmp_path / "draft.overlay"

        with pytest.raises(MissingTemplateError) as excinfo:
            resolve_template(path, draft)

        message = str(excinfo.value)
        assert message.splitlines()[0] == "No overlay template found."
        assert str(path) in message
        assert "hpc-badge draft" in message
        assert excinfo.value.exit_code == 1


class TestMergeOverlay:
    def _template(self, tmp_path):
        template = tmp_path / "template.overlay"
        template.write_text('module "Data.Stack" {\n     tick function "push" [] ;\n}\n')
        return template

    def test_merges_qualified_template(self, tmp_path):
        hpc = FakeHpc()
        dest = tmp_path / "overlay.tix"

        merge_overlay(
            hpc,
            FixedPackageResolver(PACKAGE_ID),
            self._template(tmp_path),
            tmp_path,
            tmp_path,
            dest,
        )

        (overlay_file, content), = hpc.overlays
        assert f'module "{PACKAGE_ID}/Data.Stack"' in content
        assert dest.read_text() == "Tix [ TixModule ]\n"
        assert not overlay_file.exists()

    def test_temporary_file_removed_on_failure(self, tmp_path):
        hpc = FakeHpc()
        hpc.fail_overlay = True
        dest = tmp_path / "overlay.tix"

        with pytest.raises(ToolError) as excinfo:
            merge_overlay(
                hpc,
                FixedPackageResolver(PACKAGE_ID),
                self._template(tmp_path),
                tmp_path,
                tmp_path,
                dest,
            )

        overlay_file, _ = hpc.overlays[0]
        assert excinfo.value.exit_code == 3
        assert not overlay_file.exists()
        assert not dest.exists()

    def test_temporary_file_lives_in_temp_dir(self, tmp_path):
        hpc = FakeHpc()
        merge_overlay(
            hpc,
            FixedPackageResolver(PACKAGE_ID),
            self._template(tmp_path),
            tmp_path,
            tmp_path,
            tmp_path / "overlay.tix",
        )

        overlay_file, _ = hpc.overlays[0]
        assert Path(tempfile.gettempdir()) in overlay_file.parents

    def test_resolver_failure_runs_nothing(self, tmp_path):
        hpc = FakeHpc()

        with pytest.raises(PackageResolutionError):
            merge_overlay(
                hpc,
                FailingResolver(),
                self._template(tmp_path),
                tmp_path,
                tmp_path,
                tmp_path / "overlay.tix",
            )
        assert hpc.calls == []
