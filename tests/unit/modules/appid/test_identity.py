"""Tests for app identity parsing and discovery."""

from pathlib import Path

import pytest

from workhorse.modules.appid import ENV_IDENTITY_PATH, AppIdentity, IdentityLoader
from workhorse.modules.appid.loader import MAX_SEARCH_DEPTH, search_up
from workhorse.modules.errors import ConfigError, IdentityNotFoundError


def write_identity(directory: Path, binary_name: str = "workhorse") -> Path:
    path = directory / ".fulmen" / "app.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"app:\n  binary_name: {binary_name}\n  vendor: fulmenhq\n  env_prefix: workhorse\n")
    return path


def test_from_yaml_fills_defaults():
    identity = AppIdentity.from_yaml("app:\n  binary_name: workhorse\n  env_prefix: workhorse\n")

    assert identity.binary_name == "workhorse"
    assert identity.config_name == "workhorse"
    assert identity.env_prefix == "WORKHORSE_"
    assert identity.vendor == "fulmenhq"


def test_telemetry_namespace_is_derived():
    identity = AppIdentity(binary_name="my-app", vendor="Acme")

    assert identity.telemetry_namespace() == "acme_my_app"


def test_telemetry_namespace_override():
    identity = AppIdentity.from_yaml(
        "app:\n  binary_name: workhorse\ntelemetry:\n  namespace: custom_ns\n"
    )

    assert identity.telemetry_namespace() == "custom_ns"


@pytest.mark.parametrize("content", [
    "app: [unclosed\n",
    "binary_name: workhorse\n",
    "app:\n  vendor: fulmenhq\n",
    "",
])
def test_from_yaml_rejects_malformed_documents(content):
    with pytest.raises(ConfigError):
        AppIdentity.from_yaml(content, source="app.yaml")


def test_env_path_takes_precedence(tmp_path):
    env_file = write_identity(tmp_path / "env", "from-env")
    write_identity(tmp_path / "cwd", "from-cwd")

    loader = IdentityLoader(
        cwd=tmp_path / "cwd",
        exe_dir=lambda: None,
        environ={ENV_IDENTITY_PATH: str(env_file)}
    )

    assert loader.load().binary_name == "from-env"


def test_missing_env_path_is_an_error(tmp_path):
    write_identity(tmp_path, "from-cwd")
    loader = IdentityLoader(
        cwd=tmp_path,
        exe_dir=lambda: None,
        environ={ENV_IDENTITY_PATH: str(tmp_path / "nope.yaml")}
    )

    with pytest.raises(IdentityNotFoundError):
        loader.load()


def test_search_walks_up_from_cwd(tmp_path):
    expected = write_identity(tmp_path)
    nested = tmp_path / "a" / "b" / "c"
    nested.mkdir(parents=True)

    loader = IdentityLoader(cwd=nested, exe_dir=lambda: None, environ={})

    assert loader.find_path() == expected.resolve()


def test_search_is_bounded(tmp_path):
    write_identity(tmp_path)
    deep = tmp_path
    for i in range(MAX_SEARCH_DEPTH + 1):
        deep = deep / f"d{i}"
    deep.mkdir(parents=True)

    found, searched = search_up(deep)

    assert found is None
    assert len(searched) == MAX_SEARCH_DEPTH


def test_falls_back_to_executable_dir(tmp_path):
    (tmp_path / "cwd").mkdir()
    write_identity(tmp_path / "bin", "from-exe")

    loader = IdentityLoader(cwd=tmp_path / "cwd", exe_dir=lambda: tmp_path / "bin", environ={})

    assert loader.load().binary_name == "from-exe"


def test_not_found_lists_searched_paths(tmp_path):
    (tmp_path / "cwd").mkdir()
    (tmp_path / "bin").mkdir()
    loader = IdentityLoader(cwd=tmp_path / "cwd", exe_dir=lambda: tmp_path / "bin", environ={})

    with pytest.raises(IdentityNotFoundError) as excinfo:
        loader.load()

    searched = excinfo.value.searched_paths
    assert searched[0] == str((tmp_path / "cwd" / ".fulmen" / "app.yaml").resolve())
    assert any("fallback: executable dir" in path for path in searched)
