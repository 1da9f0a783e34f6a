"""Entrypoints (inbound adapters) for ABVOTE.

The `abvote` command line: parses input, runs form validation, calls the
service layer through the bootstrap container and renders results.

Dependency rule: may import `abvote.bootstrap`, `abvote.service_layer`,
`abvote.domain` and `abvote.config`. Only the schema commands (`abvote db`)
reach into `abvote.adapters.db`.
"""
