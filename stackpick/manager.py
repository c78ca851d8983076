"""
Interactive deploy/destroy manager.

Drives the main menu, the per-verb stack pickers and the inventory
refresh cycle on top of the selection engine.
"""

import logging
import time
from typing import Callable, List, Optional, Tuple

import click

from .config import AppConfig
from .dispatch import ActionDispatcher, DispatchResult, Verb
from .inventory import (
    InventorySummary,
    ReconciledStack,
    format_status,
    parse_stack_listing,
    reconcile,
)
from .inventory.reconcile import StackLookup
from .tui import SelectionMode, make_items, run_selection

logger = logging.getLogger(__name__)

MENU_CHOICES: List[Tuple[str, str]] = [
    ("🚀 Deploy stacks", "deploy"),
    ("🗑️  Destroy stacks", "destroy"),
    ("🔄 Refresh stacks", "refresh"),
    ("❌ Exit", "exit"),
]

# config.defaultAction -> main menu entry the cursor starts on
DEFAULT_ACTION_ENTRY = {"deploy": "deploy", "delete": "destroy"}

RULE = "─────────────────────────────"


def format_stack_choice(stack: ReconciledStack) -> str:
    """Label shown for a stack in the pickers: name (backing id) status."""
    name = stack.display_name if stack.is_deployed else click.style(stack.display_name, fg="bright_black")
    backing = click.style(f"({stack.backing_id})", fg="bright_black")
    return f"{name} {backing} {format_status(stack.status, stack.raw_status)}"


def stack_choices(stacks: List[ReconciledStack], verb: Verb) -> List[Tuple[str, str]]:
    """
    Build picker choices for a verb.

    Deploy offers every declared stack; destroy only those CloudFormation knows.
    """
    if verb is Verb.DESTROY:
        stacks = [stack for stack in stacks if stack.is_deployed]
    return [(format_stack_choice(stack), stack.full_name) for stack in stacks]


class InteractiveManager:
    """Main loop of the interactive session."""

    def __init__(
        self,
        executor,
        lookup: StackLookup,
        config: AppConfig,
        select: Callable = run_selection,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.executor = executor
        self.lookup = lookup
        self.config = config
        self.select = select
        self.clock = clock
        self.dispatcher = ActionDispatcher(executor)
        self.stacks: List[ReconciledStack] = []
        self.loaded_at: Optional[float] = None
        self.running = False
        self.last_result: Optional[DispatchResult] = None

    def load_inventory(self) -> List[ReconciledStack]:
        """
        List declared stacks and reconcile them with CloudFormation.

        Raises:
            StackListingError: If the declared stacks could not be listed
        """
        output = self.executor.list_stacks()
        declared = parse_stack_listing(output)
        self.stacks = reconcile(declared, self.lookup, max_workers=self.config.lookup_concurrency)
        self.loaded_at = self.clock()
        logger.debug(f"Inventory loaded: {self.summary().describe()}")
        return self.stacks

    def summary(self) -> InventorySummary:
        return InventorySummary.from_stacks(self.stacks)

    def needs_refresh(self) -> bool:
        if self.loaded_at is None:
            return True
        if not self.config.auto_refresh:
            return False
        return self.clock() - self.loaded_at >= self.config.refresh_interval

    def refresh(self) -> None:
        click.echo("🔄 Loading stack information...")
        self.load_inventory()
        click.echo(f"✅ {self.summary().describe()}")
        for stack in self.stacks:
            if stack.error:
                click.echo(click.style(
                    f"⚠️  Status of {stack.display_name} ({stack.backing_id}) is unknown: {stack.error}",
                    fg="yellow",
                ), err=True)

    def start(self) -> None:
        self.running = True
        while self.running:
            self.show_main_menu()

    def stop(self) -> None:
        self.running = False

    def show_main_menu(self) -> None:
        if self.needs_refresh():
            self.refresh()

        click.clear()
        click.echo(click.style("🚀 AWS CDK Interactive Manager", fg="blue", bold=True))
        click.echo(click.style(RULE, fg="bright_black"))
        click.echo(click.style(f"📊 {self.summary().describe()}", fg="bright_black"))
        click.echo("")

        initial = 0
        entry = DEFAULT_ACTION_ENTRY.get(self.config.default_action)
        if entry:
            initial = [value for _, value in MENU_CHOICES].index(entry)

        action = self.select(
            make_items(MENU_CHOICES),
            "What would you like to do?",
            mode=SelectionMode.SINGLE,
            initial_cursor=initial,
        )
        self.handle_action(action)

    def handle_action(self, action: Optional[str]) -> None:
        if action == "deploy":
            self.show_stack_menu(Verb.DEPLOY)
        elif action == "destroy":
            self.show_stack_menu(Verb.DESTROY)
        elif action == "refresh":
            self.refresh()
        elif action in ("exit", None):
            self.stop()
        else:
            click.echo(click.style("Unknown action. Returning to main menu.", fg="yellow"))

    def show_stack_menu(self, verb: Verb) -> None:
        """Pick stacks for a verb and dispatch them as one batch."""
        title = "🚀 Deploy Stacks" if verb is Verb.DEPLOY else "🗑️  Destroy Stacks"
        click.clear()
        click.echo(click.style(title, fg="blue", bold=True))
        click.echo(click.style(RULE, fg="bright_black"))

        choices = stack_choices(self.stacks, verb)
        if not choices:
            if verb is Verb.DEPLOY:
                click.echo(click.style("⚠️  No stacks available for deployment.", fg="yellow"))
                click.echo(click.style("Make sure you're in a CDK project directory.", fg="bright_black"))
            else:
                click.echo(click.style("⚠️  No deployed stacks found to destroy.", fg="yellow"))
            click.pause("🔙 Press any key to go back to the main menu")
            return

        selected = self.select(
            make_items(choices),
            f"Select stacks to {verb.value} (use spacebar to select multiple):",
            mode=SelectionMode.MULTI,
            noun="stack",
        )
        if not selected:
            click.echo(click.style("No stacks selected.", fg="yellow"))
            return

        names = {stack.full_name: stack.display_name for stack in self.stacks}
        action = "Deploying" if verb is Verb.DEPLOY else "Destroying"
        click.echo(click.style(f"\n{'🚀' if verb is Verb.DEPLOY else '🗑️ '} {action} {len(selected)} stack(s)...",
                               fg="blue" if verb is Verb.DEPLOY else "red"))
        click.echo(click.style(
            f"Selected stacks: {', '.join(names.get(value, value) for value in selected)}", fg="bright_black"
        ))
        click.echo("")

        if self.config.confirm_actions and not click.confirm(f"{verb.value.capitalize()} {len(selected)} stack(s)?",
                                                             default=True):
            click.echo(click.style("Cancelled.", fg="yellow"))
            return

        result = self.dispatcher.dispatch(verb, selected)
        self.last_result = result
        click.echo(click.style(result.describe(), fg="green" if result.succeeded else "red"))
        click.echo("")

        # The batch changed live state; reconcile again before the next menu
        self.loaded_at = None
        click.pause("🔙 Press any key to go back to the main menu")
