"""HTTP transport loop between the dispatch core and the elevator authority."""

from .session import AuthorityClient, SessionSummary, run_session

__all__ = ["AuthorityClient", "SessionSummary", "run_session"]
