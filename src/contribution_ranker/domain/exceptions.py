"""Domain exception hierarchy.

The analysis core never raises on input defects; it returns typed results
with diagnostics.  These exceptions are raised only at the input boundary
(profile parsing, snapshot lookup) and are translated to HTTP status codes
by the interface layer.
"""

from __future__ import annotations


class ContributionRankerError(Exception):
    """Base exception for the entire application."""


# ── Input validation ────────────────────────────────────────────────────────


class InvalidSkillProfileError(ContributionRankerError):
    """A skill profile carries a confidence outside {0.25, 0.5, 0.75, 1.0}."""


class InvalidSnapshotIdError(ContributionRankerError):
    """The supplied snapshot or user id is empty or malformed."""


# ── Result store ────────────────────────────────────────────────────────────


class SnapshotNotFoundError(ContributionRankerError):
    """No analysis has been stored for the requested snapshot."""
