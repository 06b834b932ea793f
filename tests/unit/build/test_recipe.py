"""
Unit tests for Recipe.

Tests command line splitting, placeholder substitution and running recipes.
"""

import subprocess
import pytest
from pathlib import Path
from unittest.mock import patch
from carguino.build.recipe import Recipe, RecipeError, RecipeParams, split_command_line
from carguino.config.preferences import Preferences, PreferencesError
from carguino.errors import ProcessError


class TestSplitCommandLine:
    """Test suite for command line tokenization."""

    def test_quoted_tokens(self):
        """Test quotes delimit tokens and are removed."""
        command, args = split_command_line("foo \"bar baz\" 'qux'")

        assert command == Path("foo")
        assert args == ["bar baz", "qux"]

    def test_quoted_command(self):
        """Test a quoted program path with spaces."""
        command, args = split_command_line('"/opt/my tools/avr-gcc" -c -Os')

        assert command == Path("/opt/my tools/avr-gcc")
        assert args == ["-c", "-Os"]

    def test_extra_whitespace(self):
        command, args = split_command_line("  ar   rcs\tlib.a  ")

        assert command == Path("ar")
        assert args == ["rcs", "lib.a"]

    def test_empty_quotes(self):
        """Test an empty quoted string is an empty argument."""
        _, args = split_command_line('cc "" -c')

        assert args == ["", "-c"]

    def test_no_escaping(self):
        """Test the other quote kind is literal inside a quoted token."""
        _, args = split_command_line("cc \"it's\" '\"x\"'")

        assert args == ["it's", '"x"']

    @pytest.mark.parametrize("line", ["", "   ", "\t\n"])
    def test_empty(self, line):
        with pytest.raises(RecipeError, match="Empty command line"):
            split_command_line(line)


class TestSubstitution:
    """Test suite for %name placeholders."""

    def test_source_and_object(self):
        recipe = Recipe("%source_file -> %object_file")

        result = recipe.expand(RecipeParams(source_file="a.c", object_file="a.o"))

        assert result == "a.c -> a.o"

    def test_all_params(self):
        recipe = Recipe("cc %includes %source_file %object_file %object_files %archive_file")
        params = RecipeParams(
            source_file="s.c",
            object_file="s.o",
            object_files="a.o b.o",
            archive_file="lib.a",
            includes='"-Iinc"',
        )

        assert recipe.expand(params) == 'cc "-Iinc" s.c s.o a.o b.o lib.a'

    def test_unknown_placeholder_loses_sigil(self):
        """Test unknown placeholders come back as the bare name."""
        assert Recipe("%unknown_flag").expand(RecipeParams()) == "unknown_flag"

    def test_unset_params_are_empty(self):
        assert Recipe("ar rcs %archive_file %object_file").expand(RecipeParams()) == "ar rcs  "

    def test_substitute_splits(self):
        """Test substitution then splitting keeps quoted values together."""
        recipe = Recipe('"/bin/gcc" -c %includes "%source_file" -o "%object_file"')
        params = RecipeParams(
            source_file="/src/my file.c",
            object_file="/out/my file.o",
            includes=' "-I/core" "-I/variant"',
        )

        command, args = recipe.substitute(params)

        assert command == Path("/bin/gcc")
        assert args == ["-c", "-I/core", "-I/variant", "/src/my file.c", "-o", "/out/my file.o"]

    def test_command(self):
        assert Recipe('"/bin/avr-gcc" -c').command() == Path("/bin/avr-gcc")


class TestFromPreferences:
    """Test suite for reading recipes from preferences."""

    def test_reads_expanded_pattern(self):
        prefs = Preferences({
            "compiler.path": "/bin/",
            "recipe.ar.pattern": '"{compiler.path}ar" rcs "{archive_file}"',
            "archive_file": "%archive_file",
        })

        recipe = Recipe.from_preferences(prefs, "ar")

        assert recipe.pattern == '"/bin/ar" rcs "%archive_file"'

    def test_missing_recipe(self):
        with pytest.raises(PreferencesError, match="'recipe.S.o.pattern' missing from preferences"):
            Recipe.from_preferences(Preferences(), "S.o")

    def test_equality(self):
        assert Recipe("cc") == Recipe("cc")
        assert Recipe("cc") != Recipe("c++")
        assert len({Recipe("cc"), Recipe("cc")}) == 1


class TestRun:
    """Test suite for running recipes."""

    @pytest.fixture
    def completed(self):
        def make(stderr=b""):
            return subprocess.CompletedProcess(args=[], returncode=0, stdout=b"", stderr=stderr)
        return make

    def test_run_prints_command_and_runs(self, completed, capsys):
        recipe = Recipe('cc -c "%source_file" -o "%object_file"')

        with patch("carguino.build.recipe.exec_with_output", return_value=completed()) as mock_exec:
            recipe.run(RecipeParams(source_file="a.c", object_file="a.o"))

        mock_exec.assert_called_once_with([Path("cc"), "-c", "a.c", "-o", "a.o"])
        assert "cc -c a.c -o a.o" in capsys.readouterr().out

    def test_run_forwards_warnings(self, completed, capsys):
        """Test compiler warnings become cargo warnings."""
        stderr = b"a.c:1:5: warning: unused variable 'x'\nIn file included from a.c\n"
        recipe = Recipe("cc -c %source_file")

        with patch("carguino.build.recipe.exec_with_output", return_value=completed(stderr)):
            recipe.run(RecipeParams(source_file="a.c"))

        out = capsys.readouterr().out
        assert "cargo:warning=a.c:1:5: warning: unused variable 'x'" in out
        assert "cargo:warning=In file included" not in out

    def test_run_failure_propagates(self):
        recipe = Recipe("cc -c %source_file")

        with patch("carguino.build.recipe.exec_with_output", side_effect=ProcessError("cc", 1)):
            with pytest.raises(ProcessError, match="Process 'cc' exited with code 1"):
                recipe.run(RecipeParams(source_file="a.c"))
