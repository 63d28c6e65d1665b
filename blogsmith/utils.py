from __future__ import annotations

import shutil
from pathlib import Path

from .errors import FilesystemError


def clean_output_dir(output_dir: Path, project_root: Path) -> None:
    """Remove ``output_dir`` and recreate it empty.

    Only directories strictly inside ``project_root`` are ever removed.
    """
    output_resolved = output_dir.resolve()
    root_resolved = project_root.resolve()
    if output_resolved == root_resolved:
        raise FilesystemError("Refusing to clean project root.")
    if not output_resolved.is_relative_to(root_resolved):
        raise FilesystemError(f"Refusing to clean output directory outside project root: {output_dir}")
    try:
        if output_dir.exists():
            shutil.rmtree(output_dir)
        output_dir.mkdir(parents=True)
    except OSError as exc:
        raise FilesystemError(f"Cannot clean output directory {output_dir}: {exc}") from exc
