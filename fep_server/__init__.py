"""
FEP Server — Fediverse Enhancement Proposals served from a local git mirror.
"""

__version__ = "0.1.0"
