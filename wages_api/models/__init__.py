# wages_api/models/__init__.py
import importlib

MODEL_MODULES = ("user", "security", "employee", "attendance", "wage")

def load_all():
    """Import every model module so db.metadata holds all five tables."""
    for name in MODEL_MODULES:
        importlib.import_module(f"{__name__}.{name}")
