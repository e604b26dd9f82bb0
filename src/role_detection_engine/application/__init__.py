"""Application services for role detection."""
