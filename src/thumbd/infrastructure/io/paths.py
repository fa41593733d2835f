"""Key to path mapping for the local storage backend."""

from pathlib import Path


def path_under(root: Path, key: str) -> Path:
    """
    Path of `key` inside `root`.

    Raises:
        ValueError: If the key resolves outside `root`, e.g. through ``..``
    """
    base = Path(root).resolve()
    target = (base / key.lstrip('/')).resolve()
    if target != base and base not in target.parents:
        raise ValueError(f"Key escapes storage root {base}: {key}")
    return target
