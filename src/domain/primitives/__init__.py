"""Record-level guarantees shared by the domain models."""

from src.domain.primitives.ensure_atomicity import AtomicOperationContext
from src.domain.primitives.prevent_delete import DeletePreventionMixin

__all__: list[str] = ["AtomicOperationContext", "DeletePreventionMixin"]
