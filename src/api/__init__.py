"""HTTP surface: routes, request/response models, middleware.

Services are wired to in-memory stubs in `dependencies.governance`;
domain errors leave as problem details through `adapters`.
"""

__all__: list[str] = []
