"""Pytest configuration and shared fixtures for the md2runs test suite.

This module provides shared fixtures, test configuration, and utilities
that are used across the entire test suite.
"""

import os
from pathlib import Path
from typing import Generator

import pytest
from hypothesis import Phase, Verbosity, settings
from utils import cleanup_test_dir, create_test_temp_dir

# Register custom Hypothesis profiles
settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=20)
settings.register_profile(
    "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "fuzzing: Property-based tests driven by hypothesis")
    config.addinivalue_line("markers", "network: Tests exercising the image network layer (mocked transport)")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host environment switches from leaking into tests."""
    for name in ("MD2RUNS_DISABLE_NETWORK", "MD2RUNS_USER_AGENT", "MD2RUNS_CONFIG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for test files.

    Yields
    ------
    Path
        Temporary directory path that will be cleaned up after test.

    """
    temp_path = create_test_temp_dir()
    try:
        yield temp_path
    finally:
        cleanup_test_dir(temp_path)


@pytest.fixture
def sample_markdown() -> str:
    """Provide a markdown document touching every supported construct.

    Returns
    -------
    str
        Sample markdown used across multiple tests.

    """
    return """# Release notes

This release has **bold changes**, _subtle fixes_ and ~~old bugs~~ removed.
See [the docs](https://example.com/docs) or ping [Ada](/user/ada42?tab=profile).

- First bullet
- Second bullet
  1. Nested one
  2. Nested two

> Quoted `code` and a [link](https://example.com)

```python
print("hello")
```

![diagram](https://example.com/diagram.png "Architecture")
"""
