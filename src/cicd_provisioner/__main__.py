"""Allow running the CLI with ``python -m cicd_provisioner``."""

from cicd_provisioner.cli.main import main

main()
