"""
Click CLI for stackpick.

`stackpick` with no subcommand opens the interactive manager; `stackpick ls`
prints the reconciled inventory without touching the terminal mode.
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

import click
from botocore.exceptions import BotoCoreError

from . import __version__
from .aws import is_vault_installed, make_session, make_vault_session, verify_connection
from .cdk import CdkExecutor, CdkSettings, find_project_dir, read_app_command
from .config import MAX_LOOKUP_CONCURRENCY, load_config, save_config
from .errors import StackListingError, TerminalUnavailableError, VaultError
from .inventory import CloudFormationLookup, InventorySummary, format_status, parse_stack_listing, reconcile
from .manager import InteractiveManager
from .regions import AWS_REGIONS, is_valid_region
from .tui import SelectionMode, make_items, run_selection

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # boto chatter drowns the CDK output even in verbose mode
    for name in ("botocore", "boto3", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)


def choose_region() -> Optional[str]:
    """Ask for a region with the selection list."""
    return run_selection(
        make_items(AWS_REGIONS),
        "Select AWS region:",
        mode=SelectionMode.SINGLE,
        noun="region",
    )


def report_listing_error(error: StackListingError) -> None:
    click.echo(click.style(f"❌ Failed to list CDK stacks: {error}", fg="red"), err=True)
    if error.stderr:
        click.echo(error.stderr, err=True)
    click.echo("Make sure you're in a CDK project directory and the CDK CLI is installed.", err=True)


def build_executor(options: dict, region: str, vault_profile: Optional[str]) -> CdkExecutor:
    """Locate the CDK project and build the executor for it."""
    project_dir = find_project_dir()
    if project_dir is None:
        click.echo(click.style("⚠️  No cdk.json found; running CDK in the current directory", fg="yellow"),
                   err=True)
    app = options["app"]
    if app is None and project_dir is not None:
        app = read_app_command(project_dir)
        logger.debug(f"CDK app command: {app}")

    settings = CdkSettings(
        working_dir=project_dir or Path.cwd(),
        app=app,
        profile=options["profile"],
        region=region,
        vault_profile=vault_profile,
        verbose=options["verbose"],
    )
    return CdkExecutor(settings)


def build_lookup(options: dict, region: str, vault_profile: Optional[str]) -> CloudFormationLookup:
    """
    Build the CloudFormation lookup, exiting on an unusable profile.

    With a vault profile the lookups use the same aws-vault session
    credentials that the wrapped CDK commands get.
    """
    try:
        if vault_profile:
            if not is_vault_installed():
                click.echo(click.style("❌ aws-vault is not installed or not on PATH", fg="red"), err=True)
                sys.exit(1)
            session = make_vault_session(vault_profile, region)
        else:
            session = make_session(options["profile"], region)
    except VaultError as e:
        click.echo(click.style(f"❌ Failed to login with aws-vault: {e}", fg="red"), err=True)
        sys.exit(1)
    except BotoCoreError as e:
        click.echo(click.style(f"❌ Could not create AWS session: {e}", fg="red"), err=True)
        sys.exit(1)

    identity = verify_connection(session)
    if identity:
        click.echo(click.style(f"🔐 Connected to AWS as {identity['Arn']}", fg="bright_black"), err=True)
    else:
        click.echo(click.style("⚠️  Could not verify AWS credentials; stack statuses may be unknown",
                               fg="yellow"), err=True)

    return CloudFormationLookup(region, session=session)


@click.group(invoke_without_command=True)
@click.option("--profile", "-p", help="AWS profile to use")
@click.option("--region", "-r", help="AWS region (prompted when omitted)")
@click.option("--verbose", is_flag=True, help="Enable verbose logging")
@click.option("--config", "-c", "config_path", help="Path to configuration file")
@click.option("--vault-profile", help="Run CDK under `aws-vault exec` with this profile")
@click.option("--app", "-a", help="CDK app command (overrides cdk.json)")
@click.option("--concurrency", type=click.IntRange(1, MAX_LOOKUP_CONCURRENCY),
              help="Parallel CloudFormation lookups")
@click.version_option(__version__, prog_name="stackpick")
@click.pass_context
def main(ctx, profile, region, verbose, config_path, vault_profile, app, concurrency):
    """
    Interactive deploy/destroy manager for AWS CDK stacks.
    """
    configure_logging(verbose)

    if region and not is_valid_region(region):
        click.echo(click.style(f"⚠️  {region} is not a known AWS region", fg="yellow"), err=True)

    ctx.obj = {
        "profile": profile,
        "region": region,
        "verbose": verbose,
        "config_path": config_path,
        "vault_profile": vault_profile,
        "app": app,
        "concurrency": concurrency,
    }

    if ctx.invoked_subcommand is None:
        ctx.invoke(interactive)


@main.command()
@click.pass_obj
def interactive(options):
    """
    Open the interactive manager (default).
    """
    config = load_config(options["config_path"])
    if options["concurrency"]:
        config.lookup_concurrency = options["concurrency"]

    try:
        region = options["region"]
        if not region:
            region = choose_region()
            if not region:
                click.echo("👋 Cancelled")
                sys.exit(130)

        vault_profile = options["vault_profile"] or config.last_used_vault_profile
        if options["vault_profile"] and options["vault_profile"] != config.last_used_vault_profile:
            config.last_used_vault_profile = options["vault_profile"]
            save_config(config, options["config_path"])
        if vault_profile:
            click.echo(click.style(f"🔑 Using aws-vault profile {vault_profile}", fg="bright_black"))

        executor = build_executor(options, region, vault_profile)
        if not executor.is_installed():
            click.echo(click.style("⚠️  CDK CLI not found. Install it with: npm install -g aws-cdk", fg="yellow"),
                       err=True)

        lookup = build_lookup(options, region, vault_profile)
        manager = InteractiveManager(executor, lookup, config)
        manager.start()
        click.echo("👋 Goodbye!")

    except KeyboardInterrupt:
        click.echo("\n👋 Cancelled")
        sys.exit(130)
    except TerminalUnavailableError as e:
        click.echo(click.style(f"❌ {e}", fg="red"), err=True)
        click.echo("Use `stackpick ls` for non-interactive output.", err=True)
        sys.exit(1)
    except StackListingError as e:
        report_listing_error(e)
        sys.exit(1)


@main.command("ls")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_cmd(options, as_json):
    """
    Print the reconciled stack inventory.
    """
    config = load_config(options["config_path"])
    concurrency = options["concurrency"] or config.lookup_concurrency

    region = options["region"] or os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION")
    if not region:
        click.echo("--region is required (or set AWS_REGION)", err=True)
        sys.exit(1)

    vault_profile = options["vault_profile"]
    executor = build_executor(options, region, vault_profile)
    lookup = build_lookup(options, region, vault_profile)

    try:
        declared = parse_stack_listing(executor.list_stacks())
    except StackListingError as e:
        report_listing_error(e)
        sys.exit(1)

    stacks = reconcile(declared, lookup, max_workers=concurrency)

    if as_json:
        click.echo(json.dumps([stack.to_dict() for stack in stacks], indent=2))
        return

    if not stacks:
        click.echo("No stacks found")
        return

    for stack in stacks:
        backing = click.style(f"({stack.backing_id})", fg="bright_black")
        click.echo(f"{stack.display_name} {backing} {format_status(stack.status, stack.raw_status)}")
        if stack.error:
            click.echo(click.style(f"   {stack.error}", fg="yellow"))
    click.echo(f"\n📊 {InventorySummary.from_stacks(stacks).describe()}")


if __name__ == "__main__":
    main()
