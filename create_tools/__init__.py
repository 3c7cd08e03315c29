"""create-tools - scaffold projects from registry templates.

Command-line interface, configuration and console output.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
