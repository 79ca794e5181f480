from importlib import metadata
from pathlib import PurePosixPath
from types import SimpleNamespace

import pytest

from schema_to_baml.build import BamlCompiler, Workspace
from schema_to_baml.build import compiler as compiler_module
from schema_to_baml.config import BuildConfig
from schema_to_baml.errors import CompileError


class FakeDistribution:
    """Installed distribution declaring the baml-cli console script"""

    def __init__(self, root, declared=True):
        self.root = root
        self.entry_points = [SimpleNamespace(name="baml-cli", group="console_scripts")] if declared else []
        self.files = [PurePosixPath("baml_py/__init__.py"), PurePosixPath("../../../bin/baml-cli")]

    def locate_file(self, path):
        return self.root / path.name


def no_distribution(name):
    raise metadata.PackageNotFoundError(name)


def which_from(mapping):
    return lambda name: mapping.get(name)


@pytest.fixture
def script(tmp_path):
    path = tmp_path / "baml-cli"
    path.write_text("#!/bin/sh\n")
    return path


class TestResolveCommand:
    """Test compiler resolution order"""

    def test_distribution_first(self, monkeypatch, script):
        monkeypatch.setattr(compiler_module.metadata, "distribution", lambda name: FakeDistribution(script.parent))
        monkeypatch.setattr(compiler_module.shutil, "which", which_from({"baml-cli": "/usr/bin/baml-cli"}))

        assert BamlCompiler().resolve_command() == [str(script)]

    def test_undeclared_script_falls_back_to_path(self, monkeypatch, script):
        monkeypatch.setattr(compiler_module.metadata, "distribution", lambda name: FakeDistribution(script.parent, declared=False))
        monkeypatch.setattr(compiler_module.shutil, "which", which_from({"baml-cli": "/usr/bin/baml-cli"}))

        assert BamlCompiler().resolve_command() == ["/usr/bin/baml-cli"]

    def test_path(self, monkeypatch):
        monkeypatch.setattr(compiler_module.metadata, "distribution", no_distribution)
        monkeypatch.setattr(compiler_module.shutil, "which", which_from({"baml-cli": "/usr/bin/baml-cli", "uvx": "/usr/bin/uvx"}))

        assert BamlCompiler().resolve_command() == ["/usr/bin/baml-cli"]

    def test_package_runner(self, monkeypatch):
        monkeypatch.setattr(compiler_module.metadata, "distribution", no_distribution)
        monkeypatch.setattr(compiler_module.shutil, "which", which_from({"uvx": "/usr/bin/uvx"}))

        assert BamlCompiler().resolve_command() == ["uvx", "--from", "baml-py", "baml-cli"]

    def test_not_found(self, monkeypatch):
        monkeypatch.setattr(compiler_module.metadata, "distribution", no_distribution)
        monkeypatch.setattr(compiler_module.shutil, "which", which_from({}))

        with pytest.raises(CompileError) as exc_info:
            BamlCompiler().resolve_command()
        assert "pip install baml-py" in str(exc_info.value)

    def test_sink_reports_resolution(self, monkeypatch):
        messages = []
        monkeypatch.setattr(compiler_module.metadata, "distribution", no_distribution)
        monkeypatch.setattr(compiler_module.shutil, "which", which_from({"baml-cli": "/usr/bin/baml-cli"}))

        BamlCompiler(sink=messages.append).resolve_command()

        assert messages == ["Resolved baml-cli on PATH: /usr/bin/baml-cli"]


class TestCompile:
    """Test compiler invocation"""

    @pytest.fixture
    def workspace(self, tmp_path):
        workspace = Workspace(tmp_path, "key123", BuildConfig(cache_root=str(tmp_path)))
        workspace.prepare("class A {}")
        return workspace

    def fake_run(self, calls, returncode=0, stdout="", stderr=""):
        def run(command, **kwargs):
            calls.append((command, kwargs))
            return SimpleNamespace(returncode=returncode, stdout=stdout, stderr=stderr)

        return run

    def test_compile_runs_generate(self, monkeypatch, workspace, capsys):
        calls = []
        compiler = BamlCompiler()
        monkeypatch.setattr(compiler, "resolve_command", lambda: ["baml-cli"])
        monkeypatch.setattr(
            compiler_module.subprocess,
            "run",
            self.fake_run(calls, stdout="Wrote 12 files\n", stderr="Resolved 3 packages in 12ms\nwarning: unused\n"),
        )

        compiler.compile(workspace)

        command, kwargs = calls[0]
        assert command == ["baml-cli", "generate", "--from", "./baml_src"]
        assert kwargs["cwd"] == workspace.path
        captured = capsys.readouterr()
        assert captured.out == "Wrote 12 files\n"
        assert captured.err == "warning: unused\n"

    def test_compile_failure(self, monkeypatch, workspace):
        compiler = BamlCompiler()
        monkeypatch.setattr(compiler, "resolve_command", lambda: ["baml-cli"])
        monkeypatch.setattr(compiler_module.subprocess, "run", self.fake_run([], returncode=2, stderr="error: bad type\n"))

        with pytest.raises(CompileError) as exc_info:
            compiler.compile(workspace)
        assert exc_info.value.returncode == 2

    def test_compile_cannot_start(self, monkeypatch, workspace):
        def run(command, **kwargs):
            raise FileNotFoundError(command[0])

        compiler = BamlCompiler()
        monkeypatch.setattr(compiler, "resolve_command", lambda: ["/missing/baml-cli"])
        monkeypatch.setattr(compiler_module.subprocess, "run", run)

        with pytest.raises(CompileError):
            compiler.compile(workspace)


if __name__ == "__main__":
    pytest.main([__file__])
