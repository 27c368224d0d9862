"""Loading project graphs from JSON documents.

The engine itself never touches the filesystem; this module is the seam
used by the CLI (and by callers holding exported project JSON) to build a
validated ``Project`` from camelCase or snake_case JSON.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from progress_engine.errors import ProjectLoadError
from progress_engine.models.project import Project


def parse_project(data: dict[str, Any], source: str = "<data>") -> Project:
    """Validate a decoded JSON object into a ``Project``.

    Args:
        data: Decoded JSON object.
        source: Description of where the data came from, for error messages.

    Raises:
        ProjectLoadError: If the data does not describe a valid project.
    """
    try:
        return Project.model_validate(data)
    except ValidationError as e:
        raise ProjectLoadError(source, f"{e.error_count()} validation error(s)\n{e}") from e


def load_project(path: Path) -> Project:
    """Read and validate a project JSON file.

    Args:
        path: Path to a JSON document holding a single project.

    Raises:
        ProjectLoadError: If the file cannot be read, is not valid JSON or
            does not describe a valid project.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ProjectLoadError(str(path), str(e)) from e
    except json.JSONDecodeError as e:
        raise ProjectLoadError(str(path), f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ProjectLoadError(str(path), "expected a JSON object at the top level")

    return parse_project(data, source=str(path))
