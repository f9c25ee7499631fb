import importlib


def test_package_importable() -> None:
    module = importlib.import_module('wise_ofx')
    assert hasattr(module, '__version__')
