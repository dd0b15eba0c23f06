"""duoserver: project/task review workflow, streak counter and submission ledger."""

__version__ = "0.1.0"
