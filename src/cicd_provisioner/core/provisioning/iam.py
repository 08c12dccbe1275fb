"""IAM role and user helpers."""

import json
import logging
import time
from collections.abc import Callable
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from cicd_provisioner.config.models import ECS_TASK_EXECUTION_POLICY_ARN, PropagationConfig
from cicd_provisioner.core.provisioning.errors import ProvisioningError
from cicd_provisioner.core.provisioning.reconcile import (
    Found,
    LookupResult,
    Reconciled,
    Reporter,
    error_code,
    lookup_call,
    reconcile,
    wait_until,
)

logger = logging.getLogger(__name__)


def ensure_execution_role(session: Any, role_name: str, reporter: Reporter) -> Reconciled:
    """Ensure the ECS task execution role exists; attrs carry its ``arn``."""
    iam = session.client("iam")

    def lookup() -> LookupResult:
        return lookup_call(
            lambda: iam.get_role(RoleName=role_name),
            lambda response: Found({"arn": response["Role"]["Arn"]}),
            not_found_codes={"NoSuchEntity"},
        )

    def create() -> dict[str, Any]:
        response = iam.create_role(
            RoleName=role_name,
            AssumeRolePolicyDocument=json.dumps(_ecs_trust_policy()),
        )
        iam.attach_role_policy(RoleName=role_name, PolicyArn=ECS_TASK_EXECUTION_POLICY_ARN)
        return {"arn": response["Role"]["Arn"]}

    return reconcile("IAM execution role", role_name, lookup, create, reporter)


def wait_for_role_propagation(
    session: Any,
    role_name: str,
    policy: PropagationConfig,
    reporter: Reporter,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Wait until a new role is readable with its execution policy attached.

    IAM is eventually consistent, and ECS may still be unable to assume the
    role for a few seconds after IAM reports it, so a fixed settle delay
    follows the poll.
    """
    iam = session.client("iam")
    reporter("Waiting for IAM role propagation")

    def role_ready() -> bool:
        try:
            iam.get_role(RoleName=role_name)
            response = iam.list_attached_role_policies(RoleName=role_name)
        except ClientError as exc:
            if error_code(exc) == "NoSuchEntity":
                return False
            raise ProvisioningError(f"Failed to read role {role_name}: {exc}") from exc
        except BotoCoreError as exc:
            raise ProvisioningError(f"Failed to read role {role_name}: {exc}") from exc
        attached = {item["PolicyArn"] for item in response.get("AttachedPolicies", [])}
        return ECS_TASK_EXECUTION_POLICY_ARN in attached

    wait_until(role_ready, f"IAM role {role_name}", policy, sleep)

    if policy.settle_seconds:
        reporter(f"Role visible in IAM, allowing {policy.settle_seconds:g}s for ECS to see it")
        sleep(policy.settle_seconds)


def ensure_pipeline_user(
    session: Any,
    user_name: str,
    policy_arns: list[str],
    reporter: Reporter,
) -> Reconciled:
    """Ensure the CI user exists. Policies are attached only when it is created."""
    iam = session.client("iam")

    def lookup() -> LookupResult:
        return lookup_call(
            lambda: iam.get_user(UserName=user_name),
            lambda response: Found({"arn": response["User"]["Arn"]}),
            not_found_codes={"NoSuchEntity"},
        )

    def create() -> dict[str, Any]:
        response = iam.create_user(UserName=user_name)
        for policy_arn in policy_arns:
            logger.info(f"Attaching {policy_arn} to {user_name}")
            iam.attach_user_policy(UserName=user_name, PolicyArn=policy_arn)
        return {"arn": response["User"]["Arn"]}

    return reconcile("IAM user", user_name, lookup, create, reporter)


def _ecs_trust_policy() -> dict[str, Any]:
    """Return the ECS task trust policy."""
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"Service": "ecs-tasks.amazonaws.com"},
                "Action": "sts:AssumeRole",
            }
        ],
    }
