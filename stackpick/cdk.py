"""
CDK CLI wrapper: listing, deploying and destroying stacks.
"""

import json
import logging
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import DispatchError, StackListingError

logger = logging.getLogger(__name__)

DEFAULT_CDK_COMMAND = ("npx", "cdk")
MAX_PROJECT_SEARCH_DEPTH = 10


def find_project_dir(start: Optional[Path] = None, max_depth: int = MAX_PROJECT_SEARCH_DEPTH) -> Optional[Path]:
    """
    Find the nearest directory containing cdk.json.

    Args:
        start: Directory to start from (current directory by default)
        max_depth: How many parents to check

    Returns:
        Project directory or None
    """
    current = (start or Path.cwd()).resolve()

    for _ in range(max_depth + 1):
        if (current / "cdk.json").is_file():
            logger.debug(f"Found CDK project in {current}")
            return current
        logger.debug(f"No cdk.json in {current}")
        if current.parent == current:
            break
        current = current.parent

    return None


def read_app_command(project_dir: Path) -> Optional[str]:
    """Read the "app" command from a project's cdk.json."""
    try:
        with open(project_dir / "cdk.json") as f:
            return json.load(f).get("app")
    except (OSError, json.JSONDecodeError, AttributeError) as e:
        logger.warning(f"Could not parse {project_dir / 'cdk.json'}: {e}")
        return None


@dataclass
class CdkSettings:
    """How to invoke the CDK CLI."""
    working_dir: Optional[Path] = None
    app: Optional[str] = None
    profile: Optional[str] = None
    region: Optional[str] = None
    vault_profile: Optional[str] = None
    verbose: bool = False
    cdk_command: Tuple[str, ...] = DEFAULT_CDK_COMMAND
    extra_env: Dict[str, str] = field(default_factory=dict)


class CdkExecutor:
    """Runs CDK CLI commands, optionally under `aws-vault exec`."""

    def __init__(self, settings: CdkSettings):
        self.settings = settings

    def build_command(self, args: Sequence[str]) -> List[str]:
        """Full argv for a CDK invocation."""
        command = list(self.settings.cdk_command) + list(args)
        if self.settings.vault_profile:
            return ["aws-vault", "exec", self.settings.vault_profile, "--"] + command
        return command

    def build_env(self) -> Dict[str, str]:
        env = dict(os.environ)
        if self.settings.region:
            env["AWS_REGION"] = self.settings.region
            env["AWS_DEFAULT_REGION"] = self.settings.region
        env.update(self.settings.extra_env)
        return env

    def _common_args(self) -> List[str]:
        args = []
        if self.settings.profile and self.settings.profile != "default":
            args += ["--profile", self.settings.profile]
        if self.settings.verbose:
            args.append("--verbose")
        return args

    def _cwd(self) -> Optional[str]:
        return str(self.settings.working_dir) if self.settings.working_dir else None

    def list_stacks(self) -> str:
        """
        Run `cdk list` and return its raw output.

        Raises:
            StackListingError: If the command cannot run, fails, or prints nothing
        """
        args = ["list"]
        if self.settings.app:
            args = ["--app", self.settings.app] + args

        command = self.build_command(args)
        logger.debug(f"Executing: {' '.join(command)}")

        try:
            result = subprocess.run(
                command,
                cwd=self._cwd(),
                env=self.build_env(),
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise StackListingError(f"Could not run {command[0]}: {e}") from e

        output = result.stdout.strip()
        stderr = result.stderr.strip()

        if result.returncode != 0:
            raise StackListingError(
                f"CDK list command failed with exit code {result.returncode}",
                output=output,
                stderr=stderr,
            )
        if not output:
            raise StackListingError("CDK list command returned no output", stderr=stderr)

        logger.debug(f"CDK list raw output:\n{output}")
        return output

    def deploy(self, stack_names: Sequence[str]) -> bool:
        """Deploy stacks in one CDK invocation; output streams to the terminal."""
        args = ["deploy", *stack_names, "--require-approval", "never"] + self._common_args()
        return self._run_streaming(args)

    def destroy(self, stack_names: Sequence[str]) -> bool:
        """Destroy stacks in one CDK invocation; output streams to the terminal."""
        args = ["destroy", *stack_names, "--force"] + self._common_args()
        return self._run_streaming(args)

    def _run_streaming(self, args: Sequence[str]) -> bool:
        """
        Run a command with inherited stdio and no timeout.

        Returns:
            True on exit code 0

        Raises:
            DispatchError: If the process could not be started
        """
        command = self.build_command(args)
        logger.debug(f"Executing: {' '.join(command)}")

        try:
            result = subprocess.run(command, cwd=self._cwd(), env=self.build_env())
        except OSError as e:
            raise DispatchError(f"Could not run {command[0]}: {e}") from e

        if result.returncode != 0:
            logger.warning(f"{' '.join(command[:6])} exited with code {result.returncode}")
        return result.returncode == 0

    def is_installed(self) -> bool:
        """Check that the CDK CLI answers `--version`."""
        try:
            result = subprocess.run(
                list(self.settings.cdk_command) + ["--version"],
                cwd=self._cwd(),
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            logger.debug(f"CDK CLI not available: {e}")
            return False
        if result.returncode == 0:
            logger.debug(f"CDK version: {result.stdout.strip()}")
        return result.returncode == 0
