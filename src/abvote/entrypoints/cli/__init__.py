"""The ``abvote`` command line (see `main.abvote`)."""
