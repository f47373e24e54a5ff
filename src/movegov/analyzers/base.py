"""Abstract base class for contract fact sources and the analyzer error taxonomy.

Every fact source implements the same interface. Each source:
1. Accepts its own input shape (raw source text, a normalized-module descriptor)
2. Extracts the module identity, failing the pass if it cannot
3. Extracts optional facts best-effort, degrading to empty collections
4. Returns a ContractFacts that the catalog and template stages consume
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from movegov.models.contract import ContractFacts

# Generic type for the source-specific input
T = TypeVar("T")


class FactSource(ABC, Generic[T]):
    """Abstract interface for producers of contract facts.

    Downstream stages must not assume which source produced the facts.

    Type Parameters:
        T: The input accepted by the source (str, descriptor mapping, ...)

    Attributes:
        name: Source identifier (e.g. "source-text", "normalized-module")
    """

    def __init__(self, name: str) -> None:
        """Initialize the source.

        Args:
            name: Source identifier
        """
        self.name = name

    @abstractmethod
    def extract(self, data: T) -> ContractFacts:
        """Extract contract facts from the input.

        Args:
            data: Source-specific input

        Returns:
            Facts found in the input

        Raises:
            ModuleHeaderNotFoundError: If the module identity cannot be located
        """
        pass

    def get_metadata(self) -> dict[str, Any]:
        """Get source metadata for logging and debugging."""
        return {"name": self.name}


class MoveGovError(Exception):
    """Base class for every error raised by movegov."""


class StructuralError(MoveGovError):
    """A required fact is missing; the whole pass is aborted."""


class ModuleHeaderNotFoundError(StructuralError):
    """Raised when no ``module package::name`` header can be located."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "Unable to detect module name and package")


class EmptyCatalogError(StructuralError):
    """Raised when no governable action qualifies for generation."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "No governable actions found in the contract")


class CatalogConflictError(StructuralError):
    """Raised when action names or union variant tags collide."""

    def __init__(self, names: list[str], message: str | None = None) -> None:
        self.names = names
        super().__init__(
            message or f"Conflicting governable action names: {', '.join(names)}"
        )


class UnknownActionError(StructuralError):
    """Raised when a caller selects an action the module does not declare."""

    def __init__(self, names: list[str]) -> None:
        self.names = names
        super().__init__(f"Unknown action(s) selected: {', '.join(names)}")


class DescriptorError(MoveGovError):
    """Raised when a normalized-module descriptor is empty or malformed."""


class RPCError(MoveGovError):
    """Raised when the remote descriptor fetch fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response: Any = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.response = response
        full_message = f"RPC request failed: {message}"
        if status_code is not None:
            full_message += f" (status: {status_code})"
        super().__init__(full_message)
