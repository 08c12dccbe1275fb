"""Read-only status checks for provisioned resources."""

from typing import Any

from botocore.exceptions import ClientError

from cicd_provisioner.config.models import ProvisionerConfig
from cicd_provisioner.core.provisioning.reconcile import error_code

STATUS_KEY_ECR_REPOSITORY = "ECR repository"
STATUS_KEY_EXECUTION_ROLE = "Execution role"
STATUS_KEY_ECS_CLUSTER = "ECS cluster"
STATUS_KEY_DEFAULT_VPC = "Default VPC"
STATUS_KEY_SECURITY_GROUP = "Security group"
STATUS_KEY_LOG_GROUP = "Log group"
STATUS_KEY_TASK_DEFINITION = "Task definition"
STATUS_KEY_ECS_SERVICE = "ECS service"
STATUS_KEY_PIPELINE_USER = "Pipeline user"


def check_deployment(session: Any, config: ProvisionerConfig) -> dict[str, str]:
    """Check whether provisioned resources exist, without changing anything."""
    names = config.resources
    results: dict[str, str] = {}

    results[STATUS_KEY_ECR_REPOSITORY] = _check_ecr_repo(session, names.ecr_repository)
    results[STATUS_KEY_EXECUTION_ROLE] = _check_role(session, names.execution_role_name)
    results[STATUS_KEY_ECS_CLUSTER] = _check_cluster(session, names.cluster_name)
    vpc_id, results[STATUS_KEY_DEFAULT_VPC] = _check_default_vpc(session)
    results[STATUS_KEY_SECURITY_GROUP] = _check_security_group(
        session, names.security_group_name, vpc_id
    )
    results[STATUS_KEY_LOG_GROUP] = _check_log_group(session, names.log_group_name)
    results[STATUS_KEY_TASK_DEFINITION] = _check_task_definition(session, names.task_family)
    results[STATUS_KEY_ECS_SERVICE] = _check_service(
        session, names.cluster_name, names.service_name
    )
    results[STATUS_KEY_PIPELINE_USER] = _check_user(session, config.pipeline_user.user_name)

    return results


def status_targets(config: ProvisionerConfig) -> dict[str, str]:
    """Return the resource name shown next to each status key."""
    names = config.resources
    return {
        STATUS_KEY_ECR_REPOSITORY: names.ecr_repository,
        STATUS_KEY_EXECUTION_ROLE: names.execution_role_name,
        STATUS_KEY_ECS_CLUSTER: names.cluster_name,
        STATUS_KEY_DEFAULT_VPC: "default",
        STATUS_KEY_SECURITY_GROUP: names.security_group_name,
        STATUS_KEY_LOG_GROUP: names.log_group_name,
        STATUS_KEY_TASK_DEFINITION: names.task_family,
        STATUS_KEY_ECS_SERVICE: names.service_name,
        STATUS_KEY_PIPELINE_USER: config.pipeline_user.user_name,
    }


def _check_ecr_repo(session: Any, name: str) -> str:
    ecr = session.client("ecr")
    try:
        ecr.describe_repositories(repositoryNames=[name])
    except ClientError as exc:
        code = error_code(exc)
        if code == "RepositoryNotFoundException":
            return "missing"
        return f"error: {code}"
    return "present"


def _check_role(session: Any, role_name: str) -> str:
    iam = session.client("iam")
    try:
        iam.get_role(RoleName=role_name)
    except ClientError as exc:
        code = error_code(exc)
        if code == "NoSuchEntity":
            return "missing"
        return f"error: {code}"
    return "present"


def _check_user(session: Any, user_name: str) -> str:
    iam = session.client("iam")
    try:
        iam.get_user(UserName=user_name)
    except ClientError as exc:
        code = error_code(exc)
        if code == "NoSuchEntity":
            return "missing"
        return f"error: {code}"
    return "present"


def _check_cluster(session: Any, cluster_name: str) -> str:
    ecs = session.client("ecs")
    try:
        response = ecs.describe_clusters(clusters=[cluster_name])
    except ClientError as exc:
        return f"error: {error_code(exc)}"
    clusters = response.get("clusters", [])
    if not clusters:
        return "missing"
    if clusters[0].get("status") != "ACTIVE":
        return f"status {clusters[0].get('status')}"
    return "present"


def _check_default_vpc(session: Any) -> tuple[str | None, str]:
    ec2 = session.client("ec2")
    try:
        response = ec2.describe_vpcs(Filters=[{"Name": "is-default", "Values": ["true"]}])
    except ClientError as exc:
        return None, f"error: {error_code(exc)}"
    vpcs = response.get("Vpcs", [])
    if not vpcs:
        return None, "missing"
    return str(vpcs[0]["VpcId"]), "present"


def _check_security_group(session: Any, name: str, vpc_id: str | None) -> str:
    if not vpc_id:
        return "not set"
    ec2 = session.client("ec2")
    try:
        response = ec2.describe_security_groups(
            Filters=[
                {"Name": "group-name", "Values": [name]},
                {"Name": "vpc-id", "Values": [vpc_id]},
            ]
        )
    except ClientError as exc:
        code = error_code(exc)
        if code == "InvalidGroup.NotFound":
            return "missing"
        return f"error: {code}"
    return "present" if response.get("SecurityGroups") else "missing"


def _check_log_group(session: Any, log_group_name: str) -> str:
    logs = session.client("logs")
    try:
        response = logs.describe_log_groups(logGroupNamePrefix=log_group_name)
    except ClientError as exc:
        return f"error: {error_code(exc)}"
    groups = [group["logGroupName"] for group in response.get("logGroups", [])]
    return "present" if log_group_name in groups else "missing"


def _check_task_definition(session: Any, task_family: str) -> str:
    ecs = session.client("ecs")
    try:
        response = ecs.describe_task_definition(taskDefinition=task_family)
    except ClientError as exc:
        code = error_code(exc)
        if code in {"ClientException", "InvalidParameterException"}:
            return "missing"
        return f"error: {code}"

    task_definition = response.get("taskDefinition", {})
    status = str(task_definition.get("status", "")).upper()
    if status and status != "ACTIVE":
        return f"status {status}"
    return f"present (revision {task_definition.get('revision')})"


def _check_service(session: Any, cluster_name: str, service_name: str) -> str:
    ecs = session.client("ecs")
    try:
        response = ecs.describe_services(cluster=cluster_name, services=[service_name])
    except ClientError as exc:
        code = error_code(exc)
        if code == "ClusterNotFoundException":
            return "missing"
        return f"error: {code}"
    services = response.get("services", [])
    if not services:
        return "missing"
    if services[0].get("status") != "ACTIVE":
        return f"status {services[0].get('status')}"
    return "present"
