"""SchoolRoute administrative tooling: student spreadsheet import and mapping."""

__version__ = "0.1.0"
