"""Small helpers shared by the controller factory and middleware chain."""

import importlib
from typing import Any, Tuple


def split_reference(reference: str) -> Tuple[str, str]:
    """
    Split "package.module:Attr.path" into its module and attribute parts.

    Raises:
        ValueError: If the reference has no ":" separator.
    """
    module_name, sep, attr_path = reference.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(f"Expected 'module:name', got '{reference}'")
    return module_name, attr_path


def import_string(reference: str) -> Any:
    """
    Import an object from a "package.module:Attr.path" reference.

    Raises:
        ImportError: Module can't be imported or the attribute is missing.
        ValueError: Malformed reference.
    """
    module_name, attr_path = split_reference(reference)
    target: Any = importlib.import_module(module_name)
    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError as exc:
            raise ImportError(f"'{module_name}' has no attribute '{attr_path}'") from exc
    return target
