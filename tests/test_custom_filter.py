"""Tests for CustomCommandFilter."""

import re

import pytest

from claw_hooks.filters.base import DEPTH_EXCEEDED_MESSAGE
from claw_hooks.filters.custom import CustomCommandFilter
from claw_hooks.models import Allow, Block, Event, EventKind


class TestPatternMode:
    """Custom filters without args match a regex at the start of each command."""

    @pytest.fixture
    def yarn(self):
        return CustomCommandFilter("yarn", "Use pnpm instead of yarn")

    def test_quoted_mention_allowed(self, yarn):
        """yarn inside quotes is not a command; pnpm is the real one."""
        assert yarn.decide(Event.shell('echo "not yarn install"; pnpm install')) == Allow()

    def test_substitution_blocked(self, yarn):
        assert yarn.decide(Event.shell("echo $(yarn --version)")) == Block("Use pnpm instead of yarn")

    def test_direct_command_blocked(self, yarn):
        assert isinstance(yarn.decide(Event.shell("yarn install")), Block)

    def test_argument_position_allowed(self, yarn):
        """Anchoring keeps `grep yarn` from matching."""
        assert yarn.decide(Event.shell("grep yarn package.json")) == Allow()

    def test_wrapped_command_blocked(self, yarn):
        assert isinstance(yarn.decide(Event.shell("sudo yarn add x")), Block)

    @pytest.mark.parametrize(
        "line",
        ["'yarn' install", "\"yarn\" install", "y\"ar\"n install", "\\yarn install", "sudo 'yarn' add x"],
    )
    def test_quoted_command_name_blocked(self, yarn, line):
        """Quoting or escaping the command word does not hide it."""
        assert yarn.decide(Event.shell(line)) == Block("Use pnpm instead of yarn")

    def test_quoted_name_with_spanning_pattern(self):
        npm_install = CustomCommandFilter(r"npm install", "Use pnpm add")
        assert isinstance(npm_install.decide(Event.shell("'npm' install")), Block)

    def test_deep_nesting_blocked(self, yarn):
        line = "echo " + "$(" * 33 + "yarn install" + ")" * 33
        assert yarn.decide(Event.shell(line)) == Block(DEPTH_EXCEEDED_MESSAGE)

    def test_pattern_spanning_arguments(self):
        npm_install = CustomCommandFilter(r"npm (install|i)\b", "Use pnpm add")
        assert isinstance(npm_install.decide(Event.shell("npm install lodash")), Block)
        assert npm_install.decide(Event.shell("npm run build")) == Allow()

    def test_already_anchored_pattern(self):
        python = CustomCommandFilter("^python", "Use uv")
        assert isinstance(python.decide(Event.shell("python script.py")), Block)


class TestArgumentMode:
    """Custom filters with args match the command name and first argument."""

    @pytest.fixture
    def npm(self):
        return CustomCommandFilter("npm", "Use pnpm", args=["install", "i", "add"])

    def test_listed_subcommand_blocked(self, npm):
        assert npm.decide(Event.shell("npm install lodash")) == Block("Use pnpm")
        assert isinstance(npm.decide(Event.shell("npm i")), Block)

    def test_other_subcommand_allowed(self, npm):
        assert npm.decide(Event.shell("npm run build")) == Allow()

    def test_bare_command_allowed(self, npm):
        assert npm.decide(Event.shell("npm")) == Allow()

    def test_name_must_match_fully(self, npm):
        assert npm.decide(Event.shell("pnpm install")) == Allow()
        assert npm.decide(Event.shell("npx install")) == Allow()

    def test_wrapped_command_blocked(self, npm):
        assert isinstance(npm.decide(Event.shell("sudo npm install x")), Block)

    def test_empty_args_match_name_only(self):
        npm = CustomCommandFilter("npm", "No npm", args=[])
        assert isinstance(npm.decide(Event.shell("npm")), Block)
        assert isinstance(npm.decide(Event.shell("npm run build")), Block)


class TestCustomFilterBasics:
    def test_invalid_regex_raises(self):
        with pytest.raises(re.error):
            CustomCommandFilter("(unclosed", "message")

    def test_applies_only_to_pre_tool_use_shell(self):
        yarn = CustomCommandFilter("yarn", "m")
        assert yarn.applies_to(Event.shell("yarn"))
        assert not yarn.applies_to(Event.shell("yarn", EventKind.POST_TOOL_USE))

    def test_priority_between_builtin_and_side_effects(self):
        assert 20 < CustomCommandFilter("x", "m").priority < 100
