"""Errors raised while provisioning."""


class ProvisioningError(RuntimeError):
    """Base class for failures that abort a provisioning run."""


class ReconcileError(ProvisioningError):
    """A lookup failed for a reason other than the resource being absent."""

    def __init__(self, kind: str, name: str, cause: BaseException) -> None:
        super().__init__(f"Failed to look up {kind} {name}: {cause}")
        self.kind = kind
        self.name = name
        self.cause = cause


class ResourceCreationError(ProvisioningError):
    """A create or update call was rejected."""


class NetworkNotFoundError(ProvisioningError):
    """No default VPC, or a default VPC without subnets."""


class PropagationTimeoutError(ProvisioningError):
    """A resource did not become visible before the wait policy ran out."""
