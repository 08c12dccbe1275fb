"""Provisioner configuration."""

from cicd_provisioner.config.models import ProvisionerConfig
from cicd_provisioner.config.store import ConfigError, load_config

__all__ = ["ConfigError", "ProvisionerConfig", "load_config"]
