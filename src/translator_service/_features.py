"""运行时特性检测：检查可选依赖。

Runtime feature detection for optional extras.
"""
from __future__ import annotations


def _check_import(module_name: str) -> bool:
    """Check if a module is importable."""
    try:
        __import__(module_name)
        return True
    except ImportError:
        return False


HAS_KEYRING: bool = _check_import("keyring")
HAS_HTTP2: bool = _check_import("h2")


def require_extra(extra_name: str, module_name: str) -> None:
    """Raise ImportError with an installation hint if an extra is missing.

    Args:
        extra_name: Name of the pip extra (e.g., 'keyring')
        module_name: Module the extra provides (e.g., 'keyring')

    Raises:
        ImportError: When the module is not importable.
    """
    if _check_import(module_name):
        return
    raise ImportError(
        f"The '{extra_name}' extra is required for this feature. "
        f"Install it with: pip install translator-service[{extra_name}]"
    )
