"""Security group management."""

from typing import Any

from cicd_provisioner.core.provisioning.models import SecurityGroupInfo
from cicd_provisioner.core.provisioning.reconcile import (
    Found,
    LookupResult,
    NotFound,
    Reporter,
    lookup_call,
    reconcile,
)


def ensure_security_group(
    session: Any,
    vpc_id: str,
    name: str,
    description: str,
    port: int,
    cidr: str,
    reporter: Reporter,
) -> tuple[SecurityGroupInfo, bool]:
    """Ensure a security group exists in the VPC.

    A new group gets a single tcp ingress rule for ``port`` from ``cidr``.
    The rules of an existing group are left as they are.

    Returns:
        The group and whether it was created by this call.
    """
    ec2 = session.client("ec2")

    def lookup() -> LookupResult:
        return lookup_call(
            lambda: ec2.describe_security_groups(
                Filters=[
                    {"Name": "group-name", "Values": [name]},
                    {"Name": "vpc-id", "Values": [vpc_id]},
                ]
            ),
            _first_group,
            not_found_codes={"InvalidGroup.NotFound"},
        )

    def create() -> dict[str, Any]:
        response = ec2.create_security_group(
            VpcId=vpc_id,
            GroupName=name,
            Description=description,
        )
        group_id = response["GroupId"]
        ec2.create_tags(Resources=[group_id], Tags=[{"Key": "Name", "Value": name}])
        ec2.authorize_security_group_ingress(
            GroupId=group_id,
            IpPermissions=[
                {
                    "IpProtocol": "tcp",
                    "FromPort": port,
                    "ToPort": port,
                    "IpRanges": [{"CidrIp": cidr}],
                }
            ],
        )
        return {"group_id": group_id}

    result = reconcile("security group", name, lookup, create, reporter)
    group = SecurityGroupInfo(
        group_id=str(result.attrs["group_id"]),
        name=name,
        description=description,
    )
    return group, result.created


def _first_group(response: dict[str, Any]) -> LookupResult:
    groups = response.get("SecurityGroups", [])
    if not groups:
        return NotFound("missing")
    return Found({"group_id": groups[0]["GroupId"]})
