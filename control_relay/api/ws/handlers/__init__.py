import importlib
import pkgutil


def load_handlers():
    """
    Dynamically loads all envelope handler modules in this package to
    trigger their registration on the envelope handler table.
    """
    for _, module_name, _ in pkgutil.iter_modules(__path__):
        importlib.import_module(f"{__name__}.{module_name}")
