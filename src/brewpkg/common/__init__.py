"""Shared helpers used across brewpkg modules."""
