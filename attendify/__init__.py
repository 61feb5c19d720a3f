"""Attendify: attendance report parsing and analysis."""
