"""Converters from parser output to dependency graph text."""
