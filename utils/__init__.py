"""Shared helpers for the upload validator."""
