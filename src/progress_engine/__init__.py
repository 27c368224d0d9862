"""Progress Engine - project progress and critical path calculations.

This package provides the calculation core behind a project-management
front end: hierarchical weighted completion roll-ups, schedule health
assessment, Critical Path Method scheduling over typed dependencies,
and resource double-booking detection.
"""

__version__ = "0.1.0"
