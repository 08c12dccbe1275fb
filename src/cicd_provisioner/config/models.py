"""Configuration models for the provisioner."""

from pydantic import BaseModel, ConfigDict, Field

ECS_TASK_EXECUTION_POLICY_ARN = (
    "arn:aws:iam::aws:policy/service-role/AmazonECSTaskExecutionRolePolicy"
)
ECS_FULL_ACCESS_POLICY_ARN = "arn:aws:iam::aws:policy/AmazonECS_FullAccess"
ECR_FULL_ACCESS_POLICY_ARN = "arn:aws:iam::aws:policy/AmazonEC2ContainerRegistryFullAccess"


class AwsConfig(BaseModel):
    """AWS account access values."""

    region: str = "us-east-1"
    profile: str | None = None


class ResourceNames(BaseModel):
    """Names of the resources the provisioner manages."""

    cluster_name: str = "webapp-cicd-cluster"
    service_name: str = "webapp-cicd-service"
    task_family: str = "webapp-cicd-task"
    ecr_repository: str = "my-webapp"
    security_group_name: str = "webapp-cicd-sg"
    security_group_description: str = "SG for webapp CI/CD"

    @property
    def execution_role_name(self) -> str:
        """Return the ECS task execution role name for the cluster."""
        return f"ecsTaskExecutionRole-{self.cluster_name}"

    @property
    def log_group_name(self) -> str:
        """Return the CloudWatch log group name for the task family."""
        return f"/ecs/{self.task_family}"


class TaskConfig(BaseModel):
    """Task definition and service sizing."""

    cpu: int = Field(default=256, gt=0)
    memory: int = Field(default=512, gt=0)
    container_name: str = "webapp"
    container_port: int = Field(default=3001, ge=1, le=65535)
    image: str = "nginx:latest"
    desired_count: int = Field(default=1, ge=0)
    log_stream_prefix: str = "ecs"
    ingress_cidr: str = "0.0.0.0/0"


class PipelineUserConfig(BaseModel):
    """IAM user handed to the CI system."""

    user_name: str = "github-actions-user"
    policy_arns: list[str] = Field(
        default_factory=lambda: [ECS_FULL_ACCESS_POLICY_ARN, ECR_FULL_ACCESS_POLICY_ARN]
    )


class PropagationConfig(BaseModel):
    """How long to wait for a new IAM role to become usable."""

    initial_delay_seconds: float = Field(default=1.0, ge=0)
    backoff_factor: float = Field(default=2.0, ge=1)
    max_delay_seconds: float = Field(default=8.0, ge=0)
    max_attempts: int = Field(default=6, ge=1)
    settle_seconds: float = Field(default=10.0, ge=0)


class ServiceConfig(BaseModel):
    """Behaviour for an ECS service that already exists."""

    roll_out_new_revision: bool = True


class ProvisionerConfig(BaseModel):
    """Complete provisioner configuration."""

    model_config = ConfigDict(extra="ignore")

    aws: AwsConfig = Field(default_factory=AwsConfig)
    resources: ResourceNames = Field(default_factory=ResourceNames)
    task: TaskConfig = Field(default_factory=TaskConfig)
    pipeline_user: PipelineUserConfig = Field(default_factory=PipelineUserConfig)
    propagation: PropagationConfig = Field(default_factory=PropagationConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)
