"""
Tests for the module helpers.

Tests manifest reading, project root discovery, executable package
detection and path to identifier conversion.
"""

import pytest
import libcst as cst
from imptree.errors import ManifestError
from imptree.module import (
    find_main_packages,
    import_path_from,
    is_main_package,
    is_root_path,
    iter_package_dirs,
    name_from,
    root_path_from,
    root_path_from_working_dir,
)
from tests.fixtures import ACME_PROJECT, MAIN_GUARD, SYNTAX_ERROR, write_project


class TestNameFrom:
    """Tests for reading the declared project name."""

    def test_pep621_name(self, tmp_path):
        """Test [project].name."""
        write_project(tmp_path, {"pyproject.toml": '[project]\nname = "acme-tools"\n'})

        assert name_from(tmp_path) == "acme-tools"

    def test_poetry_name(self, tmp_path):
        """Test the [tool.poetry].name fallback."""
        write_project(tmp_path, {"pyproject.toml": '[tool.poetry]\nname = "acme"\n'})

        assert name_from(str(tmp_path)) == "acme"

    def test_missing_manifest(self, tmp_path):
        """Test that a directory without pyproject.toml raises."""
        with pytest.raises(ManifestError, match="could not open"):
            name_from(tmp_path)

    def test_no_name(self, tmp_path):
        """Test that a manifest without a name raises."""
        write_project(tmp_path, {"pyproject.toml": '[build-system]\nrequires = []\n'})

        with pytest.raises(ManifestError, match="no project name"):
            name_from(tmp_path)

    def test_invalid_toml(self, tmp_path):
        """Test that a malformed manifest raises."""
        write_project(tmp_path, {"pyproject.toml": "[project\nname = \n"})

        with pytest.raises(ManifestError, match="could not parse"):
            name_from(tmp_path)


class TestRootPath:
    """Tests for project root discovery."""

    def test_is_root_path(self, tmp_path):
        """Test detection of a directory holding pyproject.toml."""
        write_project(tmp_path, ACME_PROJECT)

        assert is_root_path(tmp_path)
        assert not is_root_path(tmp_path / "acme")

    def test_walks_up(self, tmp_path):
        """Test that the nearest enclosing root is found."""
        write_project(tmp_path, ACME_PROJECT)

        assert root_path_from(tmp_path / "acme" / "core") == tmp_path
        assert root_path_from(tmp_path) == tmp_path

    def test_from_working_dir(self, tmp_path, monkeypatch):
        """Test discovery starting from the working directory."""
        write_project(tmp_path, ACME_PROJECT)
        monkeypatch.chdir(tmp_path / "acme" / "tools")

        assert root_path_from_working_dir() == tmp_path

    def test_no_root(self, tmp_path, monkeypatch):
        """Test that reaching the filesystem root raises."""
        monkeypatch.setattr("imptree.module.manifest.is_root_path", lambda path: False)

        with pytest.raises(ManifestError, match="could not find a project root"):
            root_path_from(tmp_path)


class TestMainPackage:
    """Tests for executable package detection."""

    def test_dunder_main(self, tmp_path):
        """Test a package with __main__.py."""
        write_project(tmp_path, ACME_PROJECT)

        assert is_main_package(tmp_path / "acme")

    def test_main_guard(self, tmp_path):
        """Test a directory whose module has a main guard."""
        write_project(tmp_path, {"tool/run.py": MAIN_GUARD, "tool/lib.py": "x = 1\n"})

        assert is_main_package(tmp_path / "tool")

    def test_library_package(self, tmp_path):
        """Test a package without entry points."""
        write_project(tmp_path, ACME_PROJECT)

        assert not is_main_package(tmp_path / "acme" / "core")

    def test_missing_directory(self, tmp_path):
        """Test that a missing path raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            is_main_package(tmp_path / "missing")

    def test_not_a_directory(self, tmp_path):
        """Test that a file path raises NotADirectoryError."""
        write_project(tmp_path, {"mod.py": ""})

        with pytest.raises(NotADirectoryError):
            is_main_package(tmp_path / "mod.py")

    def test_syntax_error(self, tmp_path):
        """Test that unparsable modules propagate the parser error."""
        write_project(tmp_path, {"pkg/broken.py": SYNTAX_ERROR})

        with pytest.raises(cst.ParserSyntaxError):
            is_main_package(tmp_path / "pkg")

    def test_find_main_packages(self, tmp_path):
        """Test listing executable packages below a package root."""
        write_project(tmp_path, ACME_PROJECT)
        write_project(tmp_path, {"acme/__pycache__/cli.py": MAIN_GUARD})

        assert find_main_packages(tmp_path / "acme", "acme") == ["acme", "acme.tools"]

    def test_iter_package_dirs_skips_hidden(self, tmp_path):
        """Test that hidden and excluded directories are not walked."""
        write_project(tmp_path, {"a/x.py": "", ".git/y.py": "", "build/z.py": "", "b/c/w.py": ""})

        found = [p.relative_to(tmp_path).as_posix() for p in iter_package_dirs(tmp_path)]

        assert found == [".", "a", "b", "b/c"]


class TestImportPathFrom:
    """Tests for path to identifier conversion."""

    def test_directory(self):
        """Test a package directory below the module root."""
        assert (
            import_path_from("/home/j/repo/app/a/b", "app", "/home/j/repo/app")
            == "app.a.b"
        )

    def test_root_itself(self):
        """Test that the root maps to the module name."""
        assert import_path_from("/home/j/repo/app", "app", "/home/j/repo/app") == "app"

    def test_module_file(self):
        """Test that the .py suffix is dropped."""
        assert import_path_from("/r/app/a/b.py", "app", "/r/app") == "app.a.b"

    def test_package_init(self):
        """Test that a trailing __init__ is dropped."""
        assert import_path_from("/r/app/a/__init__.py", "app", "/r/app") == "app.a"

    def test_renamed_module(self):
        """Test that the module name replaces the root directory name."""
        assert import_path_from("/r/src/x/y", "acme", "/r/src/x") == "acme.y"

    def test_outside_root(self):
        """Test that a path outside the root raises ValueError."""
        with pytest.raises(ValueError):
            import_path_from("/elsewhere/a", "app", "/r/app")
