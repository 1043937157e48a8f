"""
Meeting Governance Engine

Drives formal board meetings through an ordered procedural workflow,
resolves who may vote directly or through delegated proxy chains,
tallies weighted ballots and records resolution outcomes under quorum
and threshold rules.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
