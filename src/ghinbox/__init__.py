"""ghinbox: keep a local, rule-driven triage of the GitHub notification inbox."""

__version__ = "0.1.0"
