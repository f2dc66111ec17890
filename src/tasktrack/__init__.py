"""Single-user task tracker with a JSON file store, snapshot transactions and input sanitization."""

__version__ = "0.1.0"
