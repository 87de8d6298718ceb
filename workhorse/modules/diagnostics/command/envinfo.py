from pathlib import Path
from typing import Optional

import psutil

from ....version import VersionInfo
from ...appid import AppIdentity
from ...config import AppConfig
from ...logging import BaseLogger


class EnvInfoCommand:
    """Displays environment, configuration and version information."""

    def __init__(
        self,
        logger: BaseLogger,
        identity: AppIdentity,
        version_info: VersionInfo,
        config: AppConfig,
        config_file: Optional[Path] = None
    ):
        self.logger = logger
        self.identity = identity
        self.version_info = version_info
        self.config = config
        self.config_file = config_file

    def run(self) -> None:
        log = self.logger.log_info
        info = self.version_info
        cfg = self.config

        log("=== Workhorse Environment Information ===")
        log("")

        log("Application:")
        log(f"  Name:       {self.identity.binary_name}")
        log(f"  Version:    {info.version}")
        log(f"  Commit:     {info.commit}")
        log(f"  Built:      {info.build_date}")
        log("")

        log("Dependencies:")
        for name, version in info.dependencies.items():
            log(f"  {name + ':':<18}{version}", dependency=name, version=version)
        log("")

        cpus = psutil.cpu_count() or 0
        memory_gb = psutil.virtual_memory().total / (1024 ** 3)
        log("Runtime:")
        log(f"  Python:     {info.python_version} ({info.implementation})", python_version=info.python_version)
        log(f"  Platform:   {info.platform}", platform=info.platform)
        log(f"  NumCPU:     {cpus}", num_cpu=cpus)
        log(f"  Memory:     {memory_gb:.1f} GiB")
        log("")

        log("Configuration:")
        log(f"  Server Host:      {cfg.server.host}", host=cfg.server.host)
        log(f"  Server Port:      {cfg.server.port}", port=cfg.server.port)
        log(f"  Shutdown Timeout: {cfg.server.shutdown_timeout}s")
        log(f"  Log Level:        {cfg.logging.level}", log_level=cfg.logging.level)
        log(f"  Log Profile:      {cfg.logging.profile}", log_profile=cfg.logging.profile)
        log(f"  Metrics Port:     {cfg.metrics.port}", metrics_port=cfg.metrics.port)
        if self.config_file is None:
            log("  Config File:      (using defaults and environment variables)")
        else:
            log(f"  Config File:      {self.config_file}", config_file=str(self.config_file))
        log("")

        log("=== End Environment Information ===")
