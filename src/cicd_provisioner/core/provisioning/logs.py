"""CloudWatch Logs helpers."""

from typing import Any

from cicd_provisioner.core.provisioning.reconcile import (
    Found,
    LookupResult,
    NotFound,
    Reconciled,
    Reporter,
    lookup_call,
    reconcile,
)


def ensure_log_group(session: Any, log_group_name: str, reporter: Reporter) -> Reconciled:
    """Ensure a CloudWatch log group exists.

    The API only filters by name prefix, so "/ecs/app" also returns
    "/ecs/app-v2". The group counts as present only on an exact name match.
    """
    logs = session.client("logs")

    def lookup() -> LookupResult:
        return lookup_call(
            lambda: _log_group_names(logs, log_group_name),
            lambda names: (
                Found({"name": log_group_name})
                if log_group_name in names
                else NotFound("no exact match")
            ),
        )

    def create() -> dict[str, Any]:
        logs.create_log_group(logGroupName=log_group_name)
        return {"name": log_group_name}

    return reconcile("CloudWatch log group", log_group_name, lookup, create, reporter)


def _log_group_names(logs: Any, prefix: str) -> list[str]:
    """Return the names of all log groups starting with ``prefix``."""
    paginator = logs.get_paginator("describe_log_groups")
    names: list[str] = []
    for page in paginator.paginate(logGroupNamePrefix=prefix):
        names.extend(group["logGroupName"] for group in page.get("logGroups", []))
    return names
