"""Adapters (infrastructure) for ABVOTE.

Concrete implementations of the interfaces: key-value store backends (memory,
SQLAlchemy), id generators, and the database plumbing behind them (engines,
metadata, column types, migrations).

Dependency rule: may import `abvote.interfaces`; inner layers must not import
this package.
"""
