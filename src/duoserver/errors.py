# src/duoserver/errors.py

"""
Error taxonomy shared by the stores and the HTTP surface.

- NotFound / ValidationError are request-local: the caller gets a rejected request.
- PersistenceFailure means the durable write did not complete and nothing was committed.
- StartupError aborts process initialization; there is no partial-service mode.
"""

from __future__ import annotations


class DuoServerError(Exception):
    """Base class for all errors raised by duoserver."""


class NotFound(DuoServerError):
    """A project, task or submission identifier does not resolve."""


class ValidationError(DuoServerError):
    """Malformed or incomplete input (including unrecognized fields)."""


class PersistenceFailure(DuoServerError):
    """A durable write could not complete."""


class StartupError(DuoServerError):
    """A required durable file is missing or unreadable at process start."""
