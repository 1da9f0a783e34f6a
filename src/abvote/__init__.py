"""ABVOTE

A local-first A/B image voting application. Users register, publish
paired-image tests, vote once per test and read aggregate results. All state
lives in a single key-value store; there is no network backend.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
