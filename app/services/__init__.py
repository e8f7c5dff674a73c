"""Service layer for content retrieval and page listings."""
