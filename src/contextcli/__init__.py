"""contextcli: copy a project's file tree and contents into an AI prompt."""

__version__ = "0.1.0"
