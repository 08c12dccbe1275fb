"""AWS provisioning helpers for the CI/CD pipeline."""

from cicd_provisioner.core.provisioning.ecr import ensure_repository, registry_host
from cicd_provisioner.core.provisioning.ecs import (
    container_definitions,
    ensure_cluster,
    ensure_service,
    register_task_definition,
)
from cicd_provisioner.core.provisioning.errors import (
    NetworkNotFoundError,
    PropagationTimeoutError,
    ProvisioningError,
    ReconcileError,
    ResourceCreationError,
)
from cicd_provisioner.core.provisioning.iam import (
    ensure_execution_role,
    ensure_pipeline_user,
    wait_for_role_propagation,
)
from cicd_provisioner.core.provisioning.logs import ensure_log_group
from cicd_provisioner.core.provisioning.models import (
    NetworkSelection,
    ProvisioningOutputs,
    SecurityGroupInfo,
)
from cicd_provisioner.core.provisioning.network import discover_default_network
from cicd_provisioner.core.provisioning.provisioner import provision
from cicd_provisioner.core.provisioning.reconcile import (
    Found,
    LookupFailed,
    NotFound,
    Reconciled,
    lookup_call,
    reconcile,
    wait_until,
)
from cicd_provisioner.core.provisioning.security_groups import ensure_security_group
from cicd_provisioner.core.provisioning.session import create_session, get_identity
from cicd_provisioner.core.provisioning.status import check_deployment, status_targets

__all__ = [
    "Found",
    "LookupFailed",
    "NetworkNotFoundError",
    "NetworkSelection",
    "NotFound",
    "PropagationTimeoutError",
    "ProvisioningError",
    "ProvisioningOutputs",
    "ReconcileError",
    "Reconciled",
    "ResourceCreationError",
    "SecurityGroupInfo",
    "check_deployment",
    "container_definitions",
    "create_session",
    "discover_default_network",
    "ensure_cluster",
    "ensure_execution_role",
    "ensure_log_group",
    "ensure_pipeline_user",
    "ensure_repository",
    "ensure_security_group",
    "ensure_service",
    "get_identity",
    "lookup_call",
    "provision",
    "reconcile",
    "register_task_definition",
    "registry_host",
    "status_targets",
    "wait_for_role_propagation",
    "wait_until",
]
