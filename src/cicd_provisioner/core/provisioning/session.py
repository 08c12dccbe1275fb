"""AWS session helpers."""

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from cicd_provisioner.config.models import ProvisionerConfig
from cicd_provisioner.core.provisioning.errors import ProvisioningError


def create_session(config: ProvisionerConfig) -> boto3.session.Session:
    """Create a boto3 session."""
    if config.aws.profile:
        return boto3.session.Session(
            profile_name=config.aws.profile,
            region_name=config.aws.region,
        )

    return boto3.session.Session(region_name=config.aws.region)


def get_identity(session: boto3.session.Session) -> dict[str, str]:
    """Fetch the current AWS identity."""
    client = session.client("sts")
    try:
        response = client.get_caller_identity()
    except (ClientError, BotoCoreError) as exc:
        raise ProvisioningError(f"Failed to read AWS identity: {exc}") from exc

    return {
        "Account": str(response.get("Account", "")),
        "Arn": str(response.get("Arn", "")),
        "UserId": str(response.get("UserId", "")),
    }
