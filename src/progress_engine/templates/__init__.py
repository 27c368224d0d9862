"""Project templates for Progress Engine."""

from __future__ import annotations

from progress_engine.templates.solar import (
    SOLAR_PHASES,
    create_solar_project,
    create_standard_dependencies,
    estimate_project_duration,
    get_default_resources,
    get_recommended_resources,
)

__all__ = [
    "SOLAR_PHASES",
    "create_solar_project",
    "create_standard_dependencies",
    "estimate_project_duration",
    "get_default_resources",
    "get_recommended_resources",
]
