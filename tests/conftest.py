"""Shared fixtures: an in-memory AWS account behind MagicMock clients."""

import os
from collections.abc import Callable, Iterator
from typing import Any
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from cicd_provisioner.config.models import ProvisionerConfig
from cicd_provisioner.config.settings import ProvisionerSettings

ACCOUNT = "123456789012"
REGION = "us-east-1"
SERVICES = ("sts", "ecr", "iam", "ecs", "ec2", "logs")


def client_error(code: str, operation: str = "Operation", message: str = "error") -> ClientError:
    """Build a botocore ClientError with the given code."""
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class FakeSession:
    """Stand-in for boto3.session.Session returning prepared clients."""

    def __init__(self, clients: dict[str, MagicMock]) -> None:
        self.clients = clients

    def client(self, name: str) -> MagicMock:
        return self.clients[name]


class FakeAccount:
    """A tiny stateful model of the AWS APIs the provisioner calls.

    Every call is appended to ``calls`` as ``"<service>.<operation>"``.
    ``fail(service, operation, code)`` makes an operation raise a ClientError.
    """

    def __init__(self) -> None:
        self.repositories: dict[str, str] = {}
        self.roles: dict[str, set[str]] = {}
        self.clusters: dict[str, str] = {}
        self.default_vpc: str | None = "vpc-0default"
        self.subnets = ["subnet-0a", "subnet-0b"]
        self.security_groups: dict[str, str] = {}
        self.ingress: dict[str, list[dict[str, Any]]] = {}
        self.log_groups: list[str] = []
        self.revisions: dict[str, int] = {}
        self.task_definitions: list[dict[str, Any]] = []
        self.services: dict[tuple[str, str], dict[str, Any]] = {}
        self.users: dict[str, set[str]] = {}
        self.calls: list[str] = []
        self.failures: dict[str, ClientError] = {}
        self.clients = {name: MagicMock(name=name) for name in SERVICES}
        self._wire()

    def session(self) -> FakeSession:
        return FakeSession(self.clients)

    def fail(self, service: str, operation: str, code: str = "AccessDenied") -> None:
        self.failures[f"{service}.{operation}"] = client_error(code, operation)

    def mutations(self) -> list[str]:
        """Return calls that change account state."""
        prefixes = ("create_", "register_", "attach_", "authorize_", "update_")
        return [call for call in self.calls if call.split(".", 1)[1].startswith(prefixes)]

    def _bind(self, service: str, operation: str, handler: Callable[..., Any]) -> None:
        key = f"{service}.{operation}"

        def recorded(*args: Any, **kwargs: Any) -> Any:
            self.calls.append(key)
            if key in self.failures:
                raise self.failures[key]
            return handler(*args, **kwargs)

        getattr(self.clients[service], operation).side_effect = recorded

    def _paginators(self, service: str, pages: dict[str, Callable[..., list[Any]]]) -> None:
        def get_paginator(operation: str) -> MagicMock:
            paginator = MagicMock(name=f"{service}.{operation}.paginator")
            key = f"{service}.{operation}"

            def paginate(**kwargs: Any) -> list[Any]:
                self.calls.append(key)
                if key in self.failures:
                    raise self.failures[key]
                return pages[operation](**kwargs)

            paginator.paginate.side_effect = paginate
            return paginator

        self.clients[service].get_paginator.side_effect = get_paginator

    def _wire(self) -> None:
        self._bind("sts", "get_caller_identity", self._get_caller_identity)
        self._bind("ecr", "describe_repositories", self._describe_repositories)
        self._bind("ecr", "create_repository", self._create_repository)
        self._bind("iam", "get_role", self._get_role)
        self._bind("iam", "create_role", self._create_role)
        self._bind("iam", "attach_role_policy", self._attach_role_policy)
        self._bind("iam", "list_attached_role_policies", self._list_attached_role_policies)
        self._bind("iam", "get_user", self._get_user)
        self._bind("iam", "create_user", self._create_user)
        self._bind("iam", "attach_user_policy", self._attach_user_policy)
        self._bind("ecs", "describe_clusters", self._describe_clusters)
        self._bind("ecs", "create_cluster", self._create_cluster)
        self._bind("ecs", "register_task_definition", self._register_task_definition)
        self._bind("ecs", "describe_task_definition", self._describe_task_definition)
        self._bind("ecs", "describe_services", self._describe_services)
        self._bind("ecs", "create_service", self._create_service)
        self._bind("ecs", "update_service", self._update_service)
        self._bind("ec2", "describe_vpcs", self._describe_vpcs)
        self._bind("ec2", "describe_security_groups", self._describe_security_groups)
        self._bind("ec2", "create_security_group", self._create_security_group)
        self._bind("ec2", "create_tags", lambda **kwargs: {})
        self._bind("ec2", "authorize_security_group_ingress", self._authorize_ingress)
        self._bind("logs", "create_log_group", self._create_log_group)
        self._bind("logs", "describe_log_groups", self._describe_log_groups)
        self._paginators("ec2", {"describe_subnets": self._subnet_pages})
        self._paginators(
            "logs",
            {"describe_log_groups": lambda **kwargs: [self._describe_log_groups(**kwargs)]},
        )

    def _get_caller_identity(self) -> dict[str, str]:
        return {"Account": ACCOUNT, "Arn": f"arn:aws:iam::{ACCOUNT}:user/admin", "UserId": "AIDA"}

    def _describe_repositories(self, repositoryNames: list[str]) -> dict[str, Any]:
        name = repositoryNames[0]
        if name not in self.repositories:
            raise client_error("RepositoryNotFoundException", "DescribeRepositories")
        return {"repositories": [{"repositoryName": name, "repositoryUri": self.repositories[name]}]}

    def _create_repository(self, repositoryName: str, **kwargs: Any) -> dict[str, Any]:
        uri = f"{ACCOUNT}.dkr.ecr.{REGION}.amazonaws.com/{repositoryName}"
        self.repositories[repositoryName] = uri
        return {"repository": {"repositoryName": repositoryName, "repositoryUri": uri}}

    def _role_arn(self, name: str) -> str:
        return f"arn:aws:iam::{ACCOUNT}:role/{name}"

    def _get_role(self, RoleName: str) -> dict[str, Any]:
        if RoleName not in self.roles:
            raise client_error("NoSuchEntity", "GetRole")
        return {"Role": {"RoleName": RoleName, "Arn": self._role_arn(RoleName)}}

    def _create_role(self, RoleName: str, AssumeRolePolicyDocument: str) -> dict[str, Any]:
        self.roles[RoleName] = set()
        return {"Role": {"RoleName": RoleName, "Arn": self._role_arn(RoleName)}}

    def _attach_role_policy(self, RoleName: str, PolicyArn: str) -> dict[str, Any]:
        self.roles[RoleName].add(PolicyArn)
        return {}

    def _list_attached_role_policies(self, RoleName: str) -> dict[str, Any]:
        if RoleName not in self.roles:
            raise client_error("NoSuchEntity", "ListAttachedRolePolicies")
        return {"AttachedPolicies": [{"PolicyArn": arn} for arn in sorted(self.roles[RoleName])]}

    def _get_user(self, UserName: str) -> dict[str, Any]:
        if UserName not in self.users:
            raise client_error("NoSuchEntity", "GetUser")
        return {"User": {"UserName": UserName, "Arn": f"arn:aws:iam::{ACCOUNT}:user/{UserName}"}}

    def _create_user(self, UserName: str) -> dict[str, Any]:
        self.users[UserName] = set()
        return {"User": {"UserName": UserName, "Arn": f"arn:aws:iam::{ACCOUNT}:user/{UserName}"}}

    def _attach_user_policy(self, UserName: str, PolicyArn: str) -> dict[str, Any]:
        self.users[UserName].add(PolicyArn)
        return {}

    def _cluster_arn(self, name: str) -> str:
        return f"arn:aws:ecs:{REGION}:{ACCOUNT}:cluster/{name}"

    def _describe_clusters(self, clusters: list[str]) -> dict[str, Any]:
        name = clusters[0]
        if name not in self.clusters:
            return {
                "clusters": [],
                "failures": [{"arn": self._cluster_arn(name), "reason": "MISSING"}],
            }
        return {
            "clusters": [{"clusterArn": self._cluster_arn(name), "status": self.clusters[name]}],
            "failures": [],
        }

    def _create_cluster(self, clusterName: str) -> dict[str, Any]:
        self.clusters[clusterName] = "ACTIVE"
        return {"cluster": {"clusterArn": self._cluster_arn(clusterName), "status": "ACTIVE"}}

    def _task_definition_arn(self, family: str, revision: int) -> str:
        return f"arn:aws:ecs:{REGION}:{ACCOUNT}:task-definition/{family}:{revision}"

    def _register_task_definition(self, family: str, **kwargs: Any) -> dict[str, Any]:
        revision = self.revisions.get(family, 0) + 1
        self.revisions[family] = revision
        self.task_definitions.append({"family": family, **kwargs})
        return {
            "taskDefinition": {
                "family": family,
                "revision": revision,
                "status": "ACTIVE",
                "taskDefinitionArn": self._task_definition_arn(family, revision),
            }
        }

    def _describe_task_definition(self, taskDefinition: str) -> dict[str, Any]:
        if taskDefinition not in self.revisions:
            raise client_error("ClientException", "DescribeTaskDefinition")
        revision = self.revisions[taskDefinition]
        return {
            "taskDefinition": {
                "family": taskDefinition,
                "revision": revision,
                "status": "ACTIVE",
                "taskDefinitionArn": self._task_definition_arn(taskDefinition, revision),
            }
        }

    def _service_arn(self, cluster: str, name: str) -> str:
        return f"arn:aws:ecs:{REGION}:{ACCOUNT}:service/{cluster}/{name}"

    def _describe_services(self, cluster: str, services: list[str]) -> dict[str, Any]:
        if cluster not in self.clusters:
            raise client_error("ClusterNotFoundException", "DescribeServices")
        name = services[0]
        service = self.services.get((cluster, name))
        if service is None:
            return {"services": [], "failures": [{"reason": "MISSING"}]}
        return {
            "services": [
                {
                    "serviceArn": self._service_arn(cluster, name),
                    "status": service["status"],
                    "taskDefinition": service["taskDefinition"],
                }
            ],
            "failures": [],
        }

    def _create_service(self, cluster: str, serviceName: str, **kwargs: Any) -> dict[str, Any]:
        self.services[(cluster, serviceName)] = {"status": "ACTIVE", **kwargs}
        return {
            "service": {
                "serviceArn": self._service_arn(cluster, serviceName),
                "status": "ACTIVE",
            }
        }

    def _update_service(self, cluster: str, service: str, taskDefinition: str) -> dict[str, Any]:
        self.services[(cluster, service)]["taskDefinition"] = taskDefinition
        return {"service": {"serviceArn": self._service_arn(cluster, service)}}

    def _describe_vpcs(self, Filters: list[dict[str, Any]]) -> dict[str, Any]:
        if self.default_vpc is None:
            return {"Vpcs": []}
        return {"Vpcs": [{"VpcId": self.default_vpc, "IsDefault": True}]}

    def _subnet_pages(self, Filters: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [{"Subnets": [{"SubnetId": subnet_id} for subnet_id in self.subnets]}]

    def _describe_security_groups(self, Filters: list[dict[str, Any]]) -> dict[str, Any]:
        name = Filters[0]["Values"][0]
        if name not in self.security_groups:
            return {"SecurityGroups": []}
        return {"SecurityGroups": [{"GroupId": self.security_groups[name], "GroupName": name}]}

    def _create_security_group(self, VpcId: str, GroupName: str, Description: str) -> dict[str, Any]:
        group_id = f"sg-{len(self.security_groups) + 1:04d}"
        self.security_groups[GroupName] = group_id
        self.ingress[group_id] = []
        return {"GroupId": group_id}

    def _authorize_ingress(self, GroupId: str, IpPermissions: list[dict[str, Any]]) -> dict[str, Any]:
        self.ingress[GroupId].extend(IpPermissions)
        return {"Return": True}

    def _create_log_group(self, logGroupName: str) -> dict[str, Any]:
        if logGroupName in self.log_groups:
            raise client_error("ResourceAlreadyExistsException", "CreateLogGroup")
        self.log_groups.append(logGroupName)
        return {}

    def _describe_log_groups(self, logGroupNamePrefix: str) -> dict[str, Any]:
        return {
            "logGroups": [
                {"logGroupName": name}
                for name in self.log_groups
                if name.startswith(logGroupNamePrefix)
            ]
        }


@pytest.fixture
def account() -> FakeAccount:
    """An empty AWS account with a default VPC."""
    return FakeAccount()


@pytest.fixture
def session(account: FakeAccount) -> FakeSession:
    """A session bound to the fake account."""
    return account.session()


@pytest.fixture
def config() -> ProvisionerConfig:
    """Default configuration."""
    return ProvisionerConfig()


@pytest.fixture
def messages() -> list[str]:
    """Collected progress messages."""
    return []


@pytest.fixture
def reporter(messages: list[str]) -> Callable[[str], None]:
    """Progress callback collecting into ``messages``."""
    return messages.append


@pytest.fixture
def sleeps() -> list[float]:
    """Collected sleep durations."""
    return []


@pytest.fixture
def fake_sleep(sleeps: list[float]) -> Callable[[float], None]:
    """Sleep replacement collecting into ``sleeps``."""
    return sleeps.append


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Any, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep tests away from the user's config file and CICD_* variables."""
    monkeypatch.setattr(
        "cicd_provisioner.config.store.config_file_path",
        lambda: tmp_path / "missing-config.json",
    )
    monkeypatch.setitem(ProvisionerSettings.model_config, "env_file", None)
    for key in list(os.environ):
        if key.startswith("CICD_"):
            monkeypatch.delenv(key)
    yield
