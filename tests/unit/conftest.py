import pytest
import sys
from pathlib import Path

# Make the repository root importable for `workhorse` and `tests.utils`
root_path = str(Path(__file__).parent.parent.parent)
if root_path not in sys.path:
    sys.path.append(root_path)


@pytest.fixture
def test_logger():
    from tests.utils.test_logger import create_test_logger
    return create_test_logger()


@pytest.fixture
def identity_file(tmp_path):
    """Write a minimal .fulmen/app.yaml and return its path."""
    path = tmp_path / ".fulmen" / "app.yaml"
    path.parent.mkdir()
    path.write_text(
        "app:\n"
        "  binary_name: workhorse\n"
        "  vendor: fulmenhq\n"
        "  env_prefix: WORKHORSE_\n"
        "  config_name: workhorse\n"
    )
    return path
