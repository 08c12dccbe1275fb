"""ECR helpers."""

from typing import Any

from boto3.session import Session

from cicd_provisioner.core.provisioning.reconcile import (
    Found,
    LookupResult,
    Reconciled,
    Reporter,
    lookup_call,
    reconcile,
)


def ensure_repository(session: Session, name: str, reporter: Reporter) -> Reconciled:
    """Ensure an ECR repository exists; attrs carry its ``uri``."""
    ecr = session.client("ecr")

    def lookup() -> LookupResult:
        return lookup_call(
            lambda: ecr.describe_repositories(repositoryNames=[name]),
            lambda response: Found({"uri": response["repositories"][0]["repositoryUri"]}),
            not_found_codes={"RepositoryNotFoundException"},
        )

    def create() -> dict[str, Any]:
        response = ecr.create_repository(
            repositoryName=name,
            imageScanningConfiguration={"scanOnPush": True},
        )
        return {"uri": response["repository"]["repositoryUri"]}

    return reconcile("ECR repository", name, lookup, create, reporter)


def registry_host(repository_uri: str) -> str:
    """Strip the repository path from a URI to get the registry host."""
    return repository_uri.split("/", 1)[0]
