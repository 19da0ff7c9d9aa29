"""Artifact client boundary and media helpers."""
