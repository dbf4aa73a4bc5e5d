"""paramtasks - parametric task naming, branch browsing and cost rollups."""

__version__ = "0.1.0"
