"""Data models for provisioning."""

from dataclasses import dataclass, field


@dataclass
class SecurityGroupInfo:
    """Representation of a security group."""

    group_id: str
    name: str
    description: str


@dataclass
class NetworkSelection:
    """Discovered network configuration."""

    vpc_id: str
    subnet_ids: list[str] = field(default_factory=list)


@dataclass
class ProvisioningOutputs:
    """Identifiers produced by a provisioning run."""

    registry_host: str
    repository_name: str
    cluster_name: str
    service_name: str
    repository_uri: str = ""
    execution_role_arn: str = ""
    cluster_arn: str = ""
    task_definition_arn: str = ""
    service_arn: str = ""
    vpc_id: str = ""
    subnet_ids: list[str] = field(default_factory=list)
    security_group_id: str = ""
    log_group_name: str = ""
    pipeline_user_arn: str = ""
    created: list[str] = field(default_factory=list)

    def secrets(self) -> dict[str, str]:
        """Return the values to store as CI secrets, in print order."""
        return {
            "ECR_REGISTRY": self.registry_host,
            "ECR_REPOSITORY": self.repository_name,
            "ECS_CLUSTER": self.cluster_name,
            "ECS_SERVICE": self.service_name,
        }
