"""Provisioning pipeline."""

import logging
import os
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from jinja2 import TemplateError

from nginx_installer.errors import InstallerError, PreconditionError, StepFailedError
from nginx_installer.models.install import InstallConfig
from nginx_installer.providers import ProviderRegistry
from nginx_installer.utils.system import require_root


logger = logging.getLogger(__name__)

# Fixed execution order
STEP_ORDER = ["user", "directory", "bootdirective", "package", "install"]


@dataclass
class StepResult:
    """Outcome of a single step."""
    step_id: str
    ok: bool
    error: Optional[InstallerError] = None


@dataclass
class ProvisionResult:
    """Outcome of a provisioning run."""
    steps: List[StepResult] = field(default_factory=list)
    error: Optional[InstallerError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def ran_steps(self) -> List[str]:
        return [s.step_id for s in self.steps if s.ok]

    @property
    def failed_step(self) -> Optional[str]:
        failed = [s.step_id for s in self.steps if not s.ok]
        return failed[0] if failed else None


class Provisioner:
    """Runs the provisioning steps in order, stopping at the first failure.

    Nothing is rolled back: side effects of completed steps stay in place.
    """

    def __init__(
        self,
        provider_registry: ProviderRegistry,
        geteuid: Callable[[], int] = os.geteuid,
    ):
        self.provider_registry = provider_registry
        self.geteuid = geteuid

    def _providers(self):
        providers = []
        for step_id in STEP_ORDER:
            provider = self.provider_registry.get_provider(step_id)
            if provider is None:
                raise RuntimeError(f"Provider {step_id} not registered")
            providers.append((step_id, provider))
        return providers

    async def check_preconditions(self, config: InstallConfig) -> None:
        """Privilege check first, then every provider's read-only checks."""
        require_root(self.geteuid)
        for step_id, provider in self._providers():
            await provider.validate_config(config)
            logger.debug(f"Preconditions satisfied for {step_id}")

    async def run_step(self, step_id: str, provider, config: InstallConfig) -> StepResult:
        """Run one step, turning any failure into a failed result."""
        logger.info(f"Running step {step_id}")
        try:
            status = await provider.status(config)
            logger.debug(f"Step {step_id} status before run: {status.value}")
            await provider.present(config)
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            message = f"{e}{': ' + stderr if stderr else ''}"
            return StepResult(step_id, False, StepFailedError(step_id, e, message))
        except (OSError, LookupError, RuntimeError, TemplateError) as e:
            return StepResult(step_id, False, StepFailedError(step_id, e))
        except InstallerError as e:
            return StepResult(step_id, False, e)
        return StepResult(step_id, True)

    async def provision(self, config: InstallConfig) -> ProvisionResult:
        """Run the whole pipeline for config."""
        result = ProvisionResult()
        start_time = datetime.now()

        try:
            await self.check_preconditions(config)
        except PreconditionError as e:
            logger.error(str(e))
            result.error = e
            return result

        for step_id, provider in self._providers():
            step_result = await self.run_step(step_id, provider, config)
            result.steps.append(step_result)
            if not step_result.ok:
                logger.error(str(step_result.error))
                result.error = step_result.error
                return result

        duration = (datetime.now() - start_time).total_seconds()
        logger.info(f"Provisioning completed in {duration:.2f}s")
        return result
