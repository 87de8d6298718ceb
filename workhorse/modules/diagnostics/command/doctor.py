import sys
from typing import Optional

import psutil

from ....version import DEPENDENCIES, dependency_version
from ...appid import AppIdentity
from ...config.loader import user_config_dir
from ...errors import ExitCode, exit_with_code
from ...logging import BaseLogger

MIN_PYTHON = (3, 10)


class DoctorCommand:
    """Runs diagnostic checks and suggests fixes."""

    def __init__(self, logger: BaseLogger, identity: Optional[AppIdentity]):
        self.logger = logger
        self.identity = identity

    def check_python(self) -> bool:
        version = ".".join(str(part) for part in sys.version_info[:3])
        if sys.version_info[:2] >= MIN_PYTHON:
            self.logger.log_info(f"[1/5] Checking Python version... ✅ {version}", python_version=version)
            return True
        self.logger.log_warning(
            f"[1/5] Checking Python version... ⚠️  {version} (recommended: 3.10+)",
            python_version=version
        )
        return False

    def check_dependencies(self) -> bool:
        missing = [name for name in DEPENDENCIES if dependency_version(name) is None]
        if not missing:
            self.logger.log_info("[2/5] Checking dependencies... ✅ all installed")
            return True
        self.logger.log_error(
            f"[2/5] Checking dependencies... ❌ missing: {', '.join(missing)}",
            fix="pip install -e ."
        )
        return False

    def check_identity(self) -> bool:
        if self.identity is not None:
            self.logger.log_info(
                f"[3/5] Checking app identity... ✅ {self.identity.binary_name}",
                binary_name=self.identity.binary_name
            )
            return True
        self.logger.log_error("[3/5] Checking app identity... ❌ .fulmen/app.yaml not found")
        return False

    def check_config_dir(self) -> bool:
        config_dir = user_config_dir()
        name = self.identity.config_name if self.identity else ""
        path = config_dir / name if name else config_dir
        self.logger.log_info(f"[4/5] Checking config directory... ✅ {path}", config_dir=str(path))
        if not path.exists():
            self.logger.log_debug("Config directory does not exist yet; defaults and environment apply")
        return True

    def check_environment(self) -> bool:
        cpus = psutil.cpu_count() or 0
        memory_gb = psutil.virtual_memory().total / (1024 ** 3)
        self.logger.log_info(
            f"[5/5] Checking environment... ✅ {sys.platform} ({cpus} CPUs, {memory_gb:.1f} GiB)",
            os=sys.platform,
            num_cpu=cpus
        )
        return True

    def run(self) -> None:
        self.logger.log_info("=== Workhorse Doctor ===")
        self.logger.log_info("")
        self.logger.log_info("Running diagnostic checks...")
        self.logger.log_info("")

        results = [
            self.check_python(),
            self.check_dependencies(),
            self.check_identity(),
            self.check_config_dir(),
            self.check_environment(),
        ]

        self.logger.log_info("")
        if all(results):
            name = self.identity.binary_name if self.identity else "workhorse"
            self.logger.log_info(f"✅ All checks passed! Your {name} installation is healthy.")
        else:
            self.logger.log_warning("⚠️  Some checks failed. Review the output above for details.")
        self.logger.log_info("")
        self.logger.log_info("=== End Diagnostics ===")

        if not all(results):
            exit_with_code(self.logger, ExitCode.FAILURE, "Diagnostic checks failed")
