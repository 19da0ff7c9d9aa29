"""In-memory session storage."""
