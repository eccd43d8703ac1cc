"""Concrete skills built on the generic engine."""
