"""Engine import resolution — resolves ``"module:attribute"`` strings to Engine instances."""

import importlib

from finch.app import Engine


def resolve_engine(import_string: str) -> Engine:
    """Resolve an import string to a finch Engine instance.

    Accepts ``"module:attribute"``. When the attribute portion is omitted
    it defaults to ``"engine"`` (``"myapi"`` resolves to ``myapi.engine``).
    A callable that is not an Engine is treated as a factory and called.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not an ``Engine`` or factory.
    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "engine"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    if callable(obj) and not isinstance(obj, Engine):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, Engine):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a finch.Engine instance"
        raise TypeError(msg)

    return obj
