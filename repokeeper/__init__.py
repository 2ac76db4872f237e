"""Declarative maintenance workflows across many Git/GitHub repositories."""
