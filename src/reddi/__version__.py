"""Version information for reddi."""

from pathlib import Path


def _get_version() -> str:
    """Get version from VERSION file or fallback to hardcoded."""
    pkg_version = Path(__file__).parent / "VERSION"
    if pkg_version.exists():
        return pkg_version.read_text().strip()

    # Project root VERSION file (src layout, editable installs)
    root_version = Path(__file__).parent.parent.parent / "VERSION"
    if root_version.exists():
        return root_version.read_text().strip()

    return "0.1.0"


__version__ = _get_version()
