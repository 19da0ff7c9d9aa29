"""Orchestration handlers — user intents translated into provider calls and store transitions."""
