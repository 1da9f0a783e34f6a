"""Domain layer for ABVOTE.

Holds the business vocabulary: users, A/B tests, votes, tagged results and the
error taxonomy. Pure Python, no storage or framework code.

Dependency rule: do not import from `abvote.adapters`, `abvote.service_layer`
or `abvote.entrypoints`.
"""
