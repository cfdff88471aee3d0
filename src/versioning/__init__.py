"""Descriptor, version and range handling."""
