"""Error types raised by the user-user CF engine.

Only malformed input is an error. Sparse data (unknown users, undefined
similarity, empty neighborhoods) degrades to empty results instead.
"""

from __future__ import annotations


class UserCFError(ValueError):
    """Base class for engine errors."""


class InvalidRating(UserCFError):
    """A score that is non-numeric, non-finite or outside the declared range."""


class InvalidRequest(UserCFError):
    """A request or configuration parameter outside its valid domain."""


class StoreFrozenError(UserCFError):
    """Mutation attempted on a rating store after `freeze()`."""
