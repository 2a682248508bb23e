"""Pydantic models for requests, content bases, and run snapshots."""
