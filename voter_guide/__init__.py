"""
Voter Guide - ward and candidate lookup for a single municipality.

This package resolves a free-text address or community name to its municipal
ward and the election candidates standing there.
"""

__version__ = "1.0.0"
__author__ = "Civic Data Team"
