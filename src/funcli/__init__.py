"""funcli: command-line client for the Fundamento document service."""

__version__ = "0.2.0"
