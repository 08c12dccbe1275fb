"""Environment-driven settings for the provisioner."""

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from cicd_provisioner.config.models import (
    AwsConfig,
    PipelineUserConfig,
    PropagationConfig,
    ProvisionerConfig,
    ResourceNames,
    ServiceConfig,
    TaskConfig,
)
from cicd_provisioner.config.paths import env_path

ENV_FILE_PATH = str(env_path())


class ProvisionerSettings(BaseSettings):
    """Provisioner configuration read from CICD_* environment variables.

    Nested values use a double underscore, e.g. ``CICD_AWS__REGION`` or
    ``CICD_RESOURCES__CLUSTER_NAME``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CICD_",
        env_nested_delimiter="__",
        env_file=ENV_FILE_PATH,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    aws: AwsConfig = Field(default_factory=AwsConfig)
    resources: ResourceNames = Field(default_factory=ResourceNames)
    task: TaskConfig = Field(default_factory=TaskConfig)
    pipeline_user: PipelineUserConfig = Field(default_factory=PipelineUserConfig)
    propagation: PropagationConfig = Field(default_factory=PropagationConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Values passed in from the JSON config file rank below the environment.
        return env_settings, dotenv_settings, init_settings


def build_config(file_values: dict | None = None) -> ProvisionerConfig:
    """Merge config file values with the environment.

    Args:
        file_values: Values read from the JSON config file, if any.

    Returns:
        The effective provisioner configuration.
    """
    settings = ProvisionerSettings(**(file_values or {}))
    return ProvisionerConfig.model_validate(settings.model_dump())
