"""Default VPC discovery."""

from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from cicd_provisioner.core.provisioning.errors import NetworkNotFoundError, ProvisioningError
from cicd_provisioner.core.provisioning.models import NetworkSelection
from cicd_provisioner.core.provisioning.reconcile import Reporter


def discover_default_network(session: Any, reporter: Reporter) -> NetworkSelection:
    """Find the default VPC and all of its subnets.

    Nothing is created here: an account or region without a default VPC
    cannot be provisioned.
    """
    ec2 = session.client("ec2")
    reporter("Fetching default VPC and subnets")
    try:
        vpcs = ec2.describe_vpcs(Filters=[{"Name": "is-default", "Values": ["true"]}])
    except (ClientError, BotoCoreError) as exc:
        raise ProvisioningError(f"Failed to describe VPCs: {exc}") from exc

    vpc_list = vpcs.get("Vpcs", [])
    if not vpc_list:
        raise NetworkNotFoundError("No default VPC found in this region.")
    vpc_id = str(vpc_list[0]["VpcId"])

    subnet_ids = _subnet_ids(ec2, vpc_id)
    if not subnet_ids:
        raise NetworkNotFoundError(f"Default VPC {vpc_id} has no subnets.")

    reporter(f"Using VPC {vpc_id} with subnets {', '.join(subnet_ids)}")
    return NetworkSelection(vpc_id=vpc_id, subnet_ids=subnet_ids)


def _subnet_ids(ec2: Any, vpc_id: str) -> list[str]:
    """Return every subnet ID in a VPC."""
    paginator = ec2.get_paginator("describe_subnets")
    subnet_ids: list[str] = []
    try:
        for page in paginator.paginate(Filters=[{"Name": "vpc-id", "Values": [vpc_id]}]):
            subnet_ids.extend(str(subnet["SubnetId"]) for subnet in page.get("Subnets", []))
    except (ClientError, BotoCoreError) as exc:
        raise ProvisioningError(f"Failed to describe subnets of {vpc_id}: {exc}") from exc
    return subnet_ids
