"""Service layer for ABVOTE.

The application core: storage adapter, entity store, session, share codec,
navigator and form validation. Talks to storage only through
`abvote.interfaces`.

Dependency rule: may import `abvote.domain` and `abvote.interfaces`, but not
`abvote.adapters` or `abvote.entrypoints`.
"""
