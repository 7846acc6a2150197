import importlib
from pathlib import Path

import pytest


@pytest.mark.parametrize(
    "package",
    ["auto_approve", "auto_approve.approval", "auto_approve.common", "auto_approve.github"],
)
def test_packages_are_regular_packages(package):
    module = importlib.import_module(package)

    # Namespace packages have no __file__ and are skipped by setuptools' find.
    assert module.__file__ is not None
    assert Path(module.__file__).name == "__init__.py"
    assert module.__doc__
