"""Domain modules for role detection."""

from .lexical import match_keyword_set, similar
from .scoring import score_role

__all__ = ["match_keyword_set", "score_role", "similar"]
