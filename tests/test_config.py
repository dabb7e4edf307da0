"""
Tests for configuration loading — provision.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from hyperon_provision.core.config.loader import ConfigError, find_config_file, load_config


@pytest.fixture
def provision_yml(tmp_path: Path) -> Path:
    """A provision.yml that overrides a handful of defaults."""
    content = textwrap.dedent("""\
        version: 1
        repository:
          directory: hyperon
        build:
          strategy: staged-container
          target: runtime
        benchmark:
          jobs: 2
        session:
          mode: script
          script: hello
        python:
          run_tests: false
    """)
    path = tmp_path / "provision.yml"
    path.write_text(content)
    return path


class TestLoadConfig:
    def test_overrides(self, provision_yml: Path):
        config = load_config(provision_yml)
        assert config.repository.directory == "hyperon"
        assert config.build.strategy == "staged-container"
        assert config.build.target == "runtime"
        assert config.benchmark.jobs == 2
        assert config.session.script == "hello"
        assert config.python.run_tests is False

    def test_untouched_sections_keep_defaults(self, provision_yml: Path):
        config = load_config(provision_yml)
        assert config.repository.excluded_path == "doc"
        assert config.toolchain.conan_version == "2.5.0"
        assert config.toolchain.pip_version == "23.1.2"
        assert config.benchmark.version == "v1.5.2"

    def test_wrapped_under_provision_key(self, tmp_path: Path):
        path = tmp_path / "provision.yml"
        path.write_text("provision:\n  build:\n    strategy: local-container\n")
        assert load_config(path).build.strategy == "local-container"

    def test_empty_file_is_defaults(self, tmp_path: Path):
        path = tmp_path / "provision.yml"
        path.write_text("")
        assert load_config(path).build.strategy == "native"

    def test_no_file_is_defaults(self, cwd: Path):
        config = load_config()
        assert config.repository.url == "https://github.com/trueagi-io/hyperon-experimental.git"
        assert "build-essential" in config.system_packages

    def test_search_disabled(self, tmp_path: Path, monkeypatch):
        (tmp_path / "provision.yml").write_text("build:\n  strategy: bogus\n")
        monkeypatch.chdir(tmp_path)
        assert load_config(search=False).build.strategy == "native"


class TestConfigErrors:
    def test_explicit_missing(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "provision.yml"
        path.write_text("build: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "provision.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_config(path)

    def test_unknown_strategy(self, tmp_path: Path):
        path = tmp_path / "provision.yml"
        path.write_text("build:\n  strategy: podman\n")
        with pytest.raises(ConfigError, match="unknown strategy 'podman'"):
            load_config(path)

    def test_unknown_session_mode(self, tmp_path: Path):
        path = tmp_path / "provision.yml"
        path.write_text("session:\n  mode: notebook\n")
        with pytest.raises(ConfigError, match="unknown session mode"):
            load_config(path)

    def test_wrong_type(self, tmp_path: Path):
        path = tmp_path / "provision.yml"
        path.write_text("benchmark:\n  jobs: many\n")
        with pytest.raises(ConfigError, match="Invalid provisioning configuration"):
            load_config(path)


class TestFindConfigFile:
    def test_walks_upward(self, tmp_path: Path):
        (tmp_path / "provision.yml").write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == (tmp_path / "provision.yml").resolve()

    def test_not_found(self, tmp_path: Path):
        assert find_config_file(tmp_path) is None
