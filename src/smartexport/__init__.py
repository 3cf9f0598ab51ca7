"""smartexport: export linked note subgraphs from a markdown vault."""

__version__ = "0.1.0"
