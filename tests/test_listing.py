"""
Tests for parsing the declared-stack listing.
"""

import pytest

from stackpick.inventory.listing import is_noise_line, parse_stack_line, parse_stack_listing
from stackpick.inventory.models import DeclaredStack, strip_parenthetical


NOISY_OUTPUT = """
> nx run infra:synth

[WARNING] aws-cdk-lib.aws_lambda.FunctionOptions#logRetention is deprecated.
  This API will be removed in the next major release.
✨  Synthesis time: 4.2s
Pipeline/ServiceA (cf-pipeline-servicea-prod)
Pipeline/ServiceB (cf-pipeline-serviceb-prod)
SharedNetwork
npm notice New minor version of npm available!
 NX   Successfully ran target synth for project infra
Pipeline/ServiceA (cf-pipeline-servicea-prod)
"""


class TestParseStackLine:
    """Single listing lines."""

    def test_annotated_nested_stack(self):
        stack = parse_stack_line("Pipeline/ServiceA (cf-pipeline-servicea-prod)")
        assert stack == DeclaredStack(
            display_name="ServiceA",
            full_name="Pipeline/ServiceA (cf-pipeline-servicea-prod)",
            backing_id="cf-pipeline-servicea-prod",
        )
        assert stack.cdk_name == "Pipeline/ServiceA"

    def test_plain_stack_uses_own_name(self):
        """Without an annotation the stack name is its own backing id."""
        stack = parse_stack_line("  SharedNetwork  ")
        assert stack.full_name == "SharedNetwork"
        assert stack.backing_id == "SharedNetwork"
        assert stack.display_name == "SharedNetwork"

    def test_nested_without_annotation(self):
        stack = parse_stack_line("Stage/Api")
        assert stack.display_name == "Api"
        assert stack.backing_id == "Stage/Api"

    @pytest.mark.parametrize("line", [
        "",
        "   ",
        "[WARNING] something is deprecated",
        "> nx run infra:synth",
        "npm WARN config",
        "yarn run v1.22.19",
        "✨  Synthesis time: 4.2s",
        "Synthesizing stacks",
        "⠋ Building assets",
        "12345",
        "Done in 3.2s.",
        "https://example.com/docs",
    ])
    def test_noise(self, line):
        assert is_noise_line(line)
        assert parse_stack_line(line) is None


class TestParseStackListing:
    """Whole listings."""

    def test_noise_stripped_order_kept(self):
        stacks = parse_stack_listing(NOISY_OUTPUT)
        assert [s.full_name for s in stacks] == [
            "Pipeline/ServiceA (cf-pipeline-servicea-prod)",
            "Pipeline/ServiceB (cf-pipeline-serviceb-prod)",
            "SharedNetwork",
        ]

    def test_duplicates_keep_first(self):
        stacks = parse_stack_listing("A (cf-a)\nB\nA (cf-a)\n")
        assert [s.full_name for s in stacks] == ["A (cf-a)", "B"]

    def test_empty(self):
        assert parse_stack_listing("") == []

    def test_only_noise_is_empty_not_error(self):
        """A listing with no stack lines is an empty inventory."""
        assert parse_stack_listing("[WARNING] aws-cdk-lib is deprecated\n\n") == []

    def test_windows_line_endings(self):
        stacks = parse_stack_listing("A (cf-a)\r\nB (cf-b)\r\n")
        assert [s.backing_id for s in stacks] == ["cf-a", "cf-b"]


@pytest.mark.parametrize("name,expected", [
    ("Pipeline/ServiceA (cf-x)", "Pipeline/ServiceA"),
    ("Stack", "Stack"),
    ("Stack (a) ", "Stack"),
])
def test_strip_parenthetical(name, expected):
    assert strip_parenthetical(name) == expected
