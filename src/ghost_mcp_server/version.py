"""Detect an editable install whose metadata lags the checked-out source.

``__version__`` is baked in at install time; ``pyproject.toml`` moves with
the working tree. A difference means the server is running code that no
longer matches what was installed.
"""

import tomllib
from pathlib import Path

REINSTALL_HINT = "pip install -e ."


def _pyproject_path() -> Path:
    # src/ghost_mcp_server/version.py -> repository root
    return Path(__file__).resolve().parents[2] / "pyproject.toml"


def check_version_consistency() -> tuple[bool, str]:
    """Compare the installed ``__version__`` with ``pyproject.toml``.

    Returns:
        ``(ok, message)``. A wheel install ships no ``pyproject.toml`` and
        reports that instead of a verdict.
    """
    from . import __version__ as installed

    pyproject = _pyproject_path()
    if not pyproject.exists():
        return False, "Cannot find pyproject.toml for version comparison"

    try:
        with open(pyproject, "rb") as f:
            declared = tomllib.load(f).get("project", {}).get(
                "version", "unknown"
            )
    except Exception as e:
        return False, f"Failed to read version from pyproject.toml: {e}"

    if installed != declared:
        return False, (
            f"Version mismatch detected! Installed: {installed}, "
            f"pyproject.toml: {declared}. Reinstall with: {REINSTALL_HINT}"
        )
    return True, f"Version verified: {installed}"
