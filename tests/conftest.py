"""Shared test fixtures for Layerguard."""

import os
from pathlib import Path
from textwrap import dedent

import pytest


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def write_tree(root: Path, files: dict) -> Path:
    """Create ``{relative_path: content}`` under root; returns root."""
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(content), encoding="utf-8")
    return root


# The layered sample application: models < adapters < services < entrypoints
CLEAN_APP = {
    "app/__init__.py": "",
    "app/models/__init__.py": "",
    "app/models/user.py": """
        class User:
            pass
    """,
    "app/adapters/__init__.py": "",
    "app/adapters/repo.py": """
        from app.models.user import User


        def save(user: User) -> None:
            pass
    """,
    "app/services/__init__.py": "",
    "app/services/signup.py": """
        from app.adapters import repo
        from app.models.user import User


        def signup() -> User:
            user = User()
            repo.save(user)
            return user
    """,
    "app/entrypoints/__init__.py": "",
    "app/entrypoints/cli.py": """
        from app.services.signup import signup


        def main():
            signup()
    """,
}

# models.user now reaches up into the adapters layer
BROKEN_APP = dict(
    CLEAN_APP,
    **{
        "app/models/user.py": """
            from app.adapters.repo import save


            class User:
                def persist(self):
                    save(self)
        """,
    },
)

FORBIDDEN_TOML = """
[settings]
workers = 1

[[contracts]]
name = "Models are independent"
type = "forbidden"
source_modules = ["app.models.*"]
destination_modules = ["app.services.*", "app.adapters.*", "app.entrypoints.*"]
"""

LAYERS_TOML = """
[[contracts]]
name = "Layered application"
type = "layers"
layers = [
    "app.entrypoints.*",
    "app.services.*",
    "app.adapters.*",
    "app.models.*",
]
"""

CONTRACTS_TOML = FORBIDDEN_TOML + LAYERS_TOML


@pytest.fixture
def make_tree(tmp_path):
    """Factory writing a {path: content} tree under tmp_path/name."""

    def _make(files: dict, name: str = "src") -> Path:
        return write_tree(tmp_path / name, files)

    return _make


@pytest.fixture
def clean_app(tmp_path):
    """Source root holding the layered app with no violations."""
    return write_tree(tmp_path / "src", CLEAN_APP)


@pytest.fixture
def broken_app(tmp_path):
    """Source root where app.models.user imports app.adapters.repo."""
    return write_tree(tmp_path / "broken_src", BROKEN_APP)


@pytest.fixture
def contracts_file(tmp_path):
    """TOML contract file for the sample app."""
    path = tmp_path / "layerguard.toml"
    path.write_text(CONTRACTS_TOML, encoding="utf-8")
    return path


@pytest.fixture
def forbidden_only_file(tmp_path):
    """Contract file with just the forbidden contract."""
    path = tmp_path / "forbidden.toml"
    path.write_text(FORBIDDEN_TOML, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep LAYERGUARD_* / MAX_WORKERS from the outer environment out of tests."""
    for key in list(os.environ):
        if key.startswith("LAYERGUARD_") or key == "MAX_WORKERS":
            monkeypatch.delenv(key, raising=False)
