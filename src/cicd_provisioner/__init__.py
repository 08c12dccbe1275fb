"""CI/CD provisioner - ensures the AWS resources a container deployment pipeline needs."""

from cicd_provisioner.config import ProvisionerConfig, load_config
from cicd_provisioner.core.provisioning import ProvisioningError, ProvisioningOutputs, provision

__all__ = [
    "ProvisionerConfig",
    "ProvisioningError",
    "ProvisioningOutputs",
    "load_config",
    "provision",
]
