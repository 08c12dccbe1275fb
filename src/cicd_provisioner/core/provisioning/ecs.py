"""ECS cluster, task definition and service helpers."""

import logging
from typing import Any, cast

from botocore.exceptions import BotoCoreError, ClientError

from cicd_provisioner.config.models import ProvisionerConfig
from cicd_provisioner.core.provisioning.errors import ResourceCreationError
from cicd_provisioner.core.provisioning.models import NetworkSelection
from cicd_provisioner.core.provisioning.reconcile import (
    Found,
    LookupResult,
    NotFound,
    Reconciled,
    Reporter,
    lookup_call,
    reconcile,
)

logger = logging.getLogger(__name__)

ACTIVE = "ACTIVE"


def ensure_cluster(session: Any, cluster_name: str, reporter: Reporter) -> Reconciled:
    """Ensure an ACTIVE ECS cluster exists; attrs carry its ``arn``.

    describe_clusters succeeds for unknown names and reports them as
    failures, and still returns deleted clusters as INACTIVE. Anything other
    than an ACTIVE record counts as absent.
    """
    ecs = session.client("ecs")

    def lookup() -> LookupResult:
        return lookup_call(
            lambda: ecs.describe_clusters(clusters=[cluster_name]),
            lambda response: _active_record(response.get("clusters", []), "clusterArn"),
        )

    def create() -> dict[str, Any]:
        response = ecs.create_cluster(clusterName=cluster_name)
        return {"arn": response["cluster"]["clusterArn"]}

    return reconcile("ECS cluster", cluster_name, lookup, create, reporter)


def container_definitions(config: ProvisionerConfig) -> list[dict[str, Any]]:
    """Build the container definitions for the web application task."""
    task = config.task
    return [
        {
            "name": task.container_name,
            "image": task.image,
            "essential": True,
            "portMappings": [{"containerPort": task.container_port, "protocol": "tcp"}],
            "logConfiguration": {
                "logDriver": "awslogs",
                "options": {
                    "awslogs-group": config.resources.log_group_name,
                    "awslogs-region": config.aws.region,
                    "awslogs-stream-prefix": task.log_stream_prefix,
                },
            },
        }
    ]


def register_task_definition(
    session: Any,
    config: ProvisionerConfig,
    execution_role_arn: str,
    reporter: Reporter,
) -> str:
    """Register a new task definition revision and return its ARN.

    There is no existence check: every call publishes a new revision, which
    is how ECS versions task definitions.
    """
    if not execution_role_arn:
        raise ResourceCreationError(
            "Execution role must be created before registering the task definition."
        )

    ecs = session.client("ecs")
    reporter(f"Registering task definition {config.resources.task_family}")
    try:
        response = ecs.register_task_definition(
            family=config.resources.task_family,
            networkMode="awsvpc",
            requiresCompatibilities=["FARGATE"],
            cpu=str(config.task.cpu),
            memory=str(config.task.memory),
            executionRoleArn=execution_role_arn,
            containerDefinitions=container_definitions(config),
        )
    except (ClientError, BotoCoreError) as exc:
        raise ResourceCreationError(f"Failed to register task definition: {exc}") from exc

    task_definition = response["taskDefinition"]
    arn = cast(str, task_definition["taskDefinitionArn"])
    reporter(f"Registered {config.resources.task_family} revision {task_definition.get('revision')}")
    return arn


def ensure_service(
    session: Any,
    config: ProvisionerConfig,
    task_definition: str,
    network: NetworkSelection,
    security_group_id: str,
    reporter: Reporter,
) -> Reconciled:
    """Ensure an ACTIVE ECS service exists; attrs carry its ``arn``.

    When the service already exists and roll-out is enabled, it is pointed
    at ``task_definition`` so the newest revision gets deployed.
    """
    if not network.subnet_ids or not security_group_id:
        raise ResourceCreationError(
            "Network configuration is missing. Resolve subnets and security group first."
        )

    ecs = session.client("ecs")
    cluster_name = config.resources.cluster_name
    service_name = config.resources.service_name

    def lookup() -> LookupResult:
        return lookup_call(
            lambda: ecs.describe_services(cluster=cluster_name, services=[service_name]),
            lambda response: _active_record(response.get("services", []), "serviceArn"),
            not_found_codes={"ClusterNotFoundException", "ServiceNotFoundException"},
        )

    def create() -> dict[str, Any]:
        response = ecs.create_service(
            cluster=cluster_name,
            serviceName=service_name,
            taskDefinition=config.resources.task_family,
            desiredCount=config.task.desired_count,
            launchType="FARGATE",
            networkConfiguration={
                "awsvpcConfiguration": {
                    "subnets": network.subnet_ids,
                    "securityGroups": [security_group_id],
                    "assignPublicIp": "ENABLED",
                }
            },
        )
        return {"arn": response["service"]["serviceArn"]}

    result = reconcile("ECS service", service_name, lookup, create, reporter)

    if not result.created and config.service.roll_out_new_revision:
        _roll_out(ecs, cluster_name, service_name, task_definition, reporter)

    return result


def _roll_out(
    ecs: Any,
    cluster_name: str,
    service_name: str,
    task_definition: str,
    reporter: Reporter,
) -> None:
    """Point an existing service at a task definition revision."""
    reporter(f"Rolling out {task_definition} to ECS service {service_name}")
    try:
        ecs.update_service(
            cluster=cluster_name,
            service=service_name,
            taskDefinition=task_definition,
        )
    except (ClientError, BotoCoreError) as exc:
        raise ResourceCreationError(f"Failed to update service {service_name}: {exc}") from exc


def _active_record(records: list[dict[str, Any]], arn_key: str) -> LookupResult:
    """Treat the first record as present only when its status is ACTIVE."""
    if not records:
        return NotFound("missing")
    status = str(records[0].get("status", ""))
    if status != ACTIVE:
        logger.info(f"Record {records[0].get(arn_key)} has status {status}")
        return NotFound(f"status {status}")
    return Found({"arn": records[0][arn_key], "status": status})
