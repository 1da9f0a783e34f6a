"""Interfaces (application boundary) for ABVOTE.

Framework-free contracts shared by the service layer and adapters: the raw
key-value store and the id generator.

Dependency rule: this package is independent; do not import from other
`abvote.*` modules.
"""
