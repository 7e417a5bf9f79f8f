"""I/O utilities for data paths."""

from pathlib import Path

# Project root is 4 levels up from this file
_PROJECT_ROOT = Path(__file__).parent.parent.parent.parent


def get_project_root() -> Path:
    """Get the project root directory."""
    return _PROJECT_ROOT


DEFAULT_POINTS_PATH = get_project_root() / "data" / "mesta.csv"
DEFAULT_ARTIFACT_DIR = get_project_root() / "data" / "artifacts"


def ensure_dir(path: Path) -> Path:
    """Create a directory (and parents) if it doesn't exist.

    Args:
        path: Directory path

    Returns:
        The same path, for chaining
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path
