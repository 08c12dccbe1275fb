"""Provisioning entrypoint."""

import logging
import time
from collections.abc import Callable
from typing import Any

from cicd_provisioner.config.models import ProvisionerConfig
from cicd_provisioner.core.provisioning.ecr import ensure_repository, registry_host
from cicd_provisioner.core.provisioning.ecs import (
    ensure_cluster,
    ensure_service,
    register_task_definition,
)
from cicd_provisioner.core.provisioning.iam import (
    ensure_execution_role,
    ensure_pipeline_user,
    wait_for_role_propagation,
)
from cicd_provisioner.core.provisioning.logs import ensure_log_group
from cicd_provisioner.core.provisioning.models import ProvisioningOutputs
from cicd_provisioner.core.provisioning.network import discover_default_network
from cicd_provisioner.core.provisioning.reconcile import Reconciled, Reporter
from cicd_provisioner.core.provisioning.security_groups import ensure_security_group
from cicd_provisioner.core.provisioning.session import create_session, get_identity

logger = logging.getLogger(__name__)


def provision(
    config: ProvisionerConfig,
    reporter: Reporter,
    session: Any | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> ProvisioningOutputs:
    """Create or verify every resource the CI/CD pipeline needs.

    Steps run strictly in order and the first exception aborts the run.
    Nothing created before a failure is removed; running again picks up
    where the failed run stopped.

    Args:
        config: Provisioner configuration.
        reporter: Progress callback.
        session: boto3 session to use; one is created from ``config`` if omitted.
        sleep: Sleep function used while waiting for IAM propagation.

    Returns:
        Identifiers of the provisioned resources.
    """
    names = config.resources
    created: list[str] = []

    def track(result: Reconciled) -> Reconciled:
        if result.created:
            created.append(result.kind)
        return result

    reporter("Checking AWS credentials")
    session = session or create_session(config)
    identity = get_identity(session)
    reporter(f"Using AWS account {identity['Account']} ({identity['Arn']})")

    reporter("Checking ECR repository")
    repository = track(ensure_repository(session, names.ecr_repository, reporter))
    repository_uri = str(repository.attrs["uri"])

    reporter("Checking ECS execution role")
    role = track(ensure_execution_role(session, names.execution_role_name, reporter))
    if role.created:
        wait_for_role_propagation(
            session, names.execution_role_name, config.propagation, reporter, sleep
        )
    execution_role_arn = str(role.attrs["arn"])

    reporter("Checking ECS cluster")
    cluster = track(ensure_cluster(session, names.cluster_name, reporter))

    network = discover_default_network(session, reporter)

    reporter("Checking security group")
    security_group, group_created = ensure_security_group(
        session,
        network.vpc_id,
        names.security_group_name,
        names.security_group_description,
        config.task.container_port,
        config.task.ingress_cidr,
        reporter,
    )
    if group_created:
        created.append("security group")

    reporter("Checking CloudWatch log group")
    track(ensure_log_group(session, names.log_group_name, reporter))

    task_definition_arn = register_task_definition(
        session, config, execution_role_arn, reporter
    )
    created.append("task definition revision")

    reporter("Checking ECS service")
    service = track(
        ensure_service(
            session,
            config,
            task_definition_arn,
            network,
            security_group.group_id,
            reporter,
        )
    )

    reporter("Checking CI pipeline user")
    user = track(
        ensure_pipeline_user(
            session,
            config.pipeline_user.user_name,
            config.pipeline_user.policy_arns,
            reporter,
        )
    )

    host = registry_host(repository_uri)
    if not host.startswith(f"{identity['Account']}."):
        logger.warning(f"Registry host {host} does not belong to account {identity['Account']}")

    logger.info(f"Provisioning finished; created: {created}")
    return ProvisioningOutputs(
        registry_host=host,
        repository_name=names.ecr_repository,
        cluster_name=names.cluster_name,
        service_name=names.service_name,
        repository_uri=repository_uri,
        execution_role_arn=execution_role_arn,
        cluster_arn=str(cluster.attrs["arn"]),
        task_definition_arn=task_definition_arn,
        service_arn=str(service.attrs["arn"]),
        vpc_id=network.vpc_id,
        subnet_ids=network.subnet_ids,
        security_group_id=security_group.group_id,
        log_group_name=names.log_group_name,
        pipeline_user_arn=str(user.attrs["arn"]),
        created=created,
    )
