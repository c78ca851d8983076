"""
Tests for the CDK CLI wrapper.
"""

import json
import subprocess
from unittest.mock import patch

import pytest

from stackpick.cdk import CdkExecutor, CdkSettings, find_project_dir, read_app_command
from stackpick.errors import DispatchError, StackListingError


def completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class TestProjectDiscovery:
    """Locating cdk.json."""

    def test_found_in_parent(self, tmp_path):
        (tmp_path / "cdk.json").write_text(json.dumps({"app": "npx ts-node bin/app.ts"}))
        nested = tmp_path / "lib" / "constructs"
        nested.mkdir(parents=True)
        assert find_project_dir(nested) == tmp_path.resolve()
        assert read_app_command(tmp_path) == "npx ts-node bin/app.ts"

    def test_depth_limit(self, tmp_path):
        (tmp_path / "cdk.json").write_text("{}")
        nested = tmp_path / "a" / "b" / "c"
        nested.mkdir(parents=True)
        assert find_project_dir(nested, max_depth=2) is None
        assert find_project_dir(nested, max_depth=3) == tmp_path.resolve()

    def test_bad_cdk_json(self, tmp_path):
        (tmp_path / "cdk.json").write_text("{not json")
        assert read_app_command(tmp_path) is None


class TestCommands:
    """Argument and environment construction."""

    def test_plain_command(self):
        executor = CdkExecutor(CdkSettings())
        assert executor.build_command(["list"]) == ["npx", "cdk", "list"]

    def test_vault_wrapper(self):
        executor = CdkExecutor(CdkSettings(vault_profile="prod-admin"))
        assert executor.build_command(["list"]) == [
            "aws-vault", "exec", "prod-admin", "--", "npx", "cdk", "list"
        ]

    def test_region_in_environment(self):
        env = CdkExecutor(CdkSettings(region="eu-west-1")).build_env()
        assert env["AWS_REGION"] == "eu-west-1"
        assert env["AWS_DEFAULT_REGION"] == "eu-west-1"


class TestListStacks:
    """Capturing `cdk list`."""

    def test_returns_output(self, tmp_path):
        settings = CdkSettings(working_dir=tmp_path, app="node app.js", region="us-east-1")
        with patch("stackpick.cdk.subprocess.run", return_value=completed(stdout="A (cf-a)\nB\n")) as run:
            output = CdkExecutor(settings).list_stacks()

        assert output == "A (cf-a)\nB"
        args, kwargs = run.call_args
        assert args[0] == ["npx", "cdk", "--app", "node app.js", "list"]
        assert kwargs["cwd"] == str(tmp_path)
        assert kwargs["capture_output"] is True
        assert kwargs["env"]["AWS_REGION"] == "us-east-1"

    def test_nonzero_exit(self):
        with patch("stackpick.cdk.subprocess.run", return_value=completed(1, stderr="--app is required")):
            with pytest.raises(StackListingError) as excinfo:
                CdkExecutor(CdkSettings()).list_stacks()
        assert excinfo.value.stderr == "--app is required"

    def test_empty_output(self):
        with patch("stackpick.cdk.subprocess.run", return_value=completed(stdout="  \n")):
            with pytest.raises(StackListingError):
                CdkExecutor(CdkSettings()).list_stacks()

    def test_missing_binary(self):
        with patch("stackpick.cdk.subprocess.run", side_effect=FileNotFoundError("npx")):
            with pytest.raises(StackListingError):
                CdkExecutor(CdkSettings()).list_stacks()


class TestDeployDestroy:
    """Streaming batch invocations."""

    def test_deploy_batch(self):
        settings = CdkSettings(profile="dev", verbose=True)
        with patch("stackpick.cdk.subprocess.run", return_value=completed(0)) as run:
            assert CdkExecutor(settings).deploy(["Pipeline/A", "Pipeline/B"])

        args, kwargs = run.call_args
        assert args[0] == [
            "npx", "cdk", "deploy", "Pipeline/A", "Pipeline/B",
            "--require-approval", "never", "--profile", "dev", "--verbose",
        ]
        assert "capture_output" not in kwargs
        assert "timeout" not in kwargs

    def test_destroy_batch(self):
        with patch("stackpick.cdk.subprocess.run", return_value=completed(0)) as run:
            assert CdkExecutor(CdkSettings(profile="default")).destroy(["A"])
        assert run.call_args[0][0] == ["npx", "cdk", "destroy", "A", "--force"]

    def test_failure_is_false(self):
        with patch("stackpick.cdk.subprocess.run", return_value=completed(1)):
            assert CdkExecutor(CdkSettings()).deploy(["A"]) is False

    def test_launch_failure(self):
        with patch("stackpick.cdk.subprocess.run", side_effect=OSError("no such file")):
            with pytest.raises(DispatchError):
                CdkExecutor(CdkSettings()).destroy(["A"])


class TestIsInstalled:
    def test_installed(self):
        with patch("stackpick.cdk.subprocess.run", return_value=completed(0, stdout="2.150.0 (build 1)")):
            assert CdkExecutor(CdkSettings()).is_installed()

    def test_not_installed(self):
        with patch("stackpick.cdk.subprocess.run", side_effect=FileNotFoundError("npx")):
            assert not CdkExecutor(CdkSettings()).is_installed()
