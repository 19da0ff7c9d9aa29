"""Pydantic models and artifact types."""
