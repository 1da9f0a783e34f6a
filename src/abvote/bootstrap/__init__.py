"""Bootstrap (composition root) for ABVOTE.

Assembles the application at runtime: picks a key-value backend, wraps it in
the storage adapter, and wires the entity store, session, share codec and
navigator on top. Reads configuration through `abvote.config`.

Import rules:
- Entry points import *this* package (not adapters/service_layer/interfaces/domain).
- This package may import: `abvote.adapters`, `abvote.service_layer`,
  `abvote.interfaces`, `abvote.domain`, and `abvote.config`.
- Inner layers must not import `abvote.bootstrap`.

Public surface:
- `AppContainer` and `build_container`; no business rules live here.
"""

from .bootstrap import AppContainer, bootstrap, build_container

__all__ = ["AppContainer", "bootstrap", "build_container"]
