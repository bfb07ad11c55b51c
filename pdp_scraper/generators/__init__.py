"""Generators package initialization."""
