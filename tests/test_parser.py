"""Tests for shell command tokenizing and extraction."""

import pytest

from claw_hooks.parser import (
    SHELL_COMMANDS,
    ShellParser,
    depth_exceeded,
    extract_command_strings,
    extract_commands,
    extract_invocations,
    find_substitutions,
    get_parser,
    split_segments,
    strip_quoted,
    tokenize,
)


class TestTokenize:
    """Tests for quote-aware tokenizing."""

    def test_double_quotes_group_words(self):
        """Double-quoted text is one token."""
        assert tokenize('git commit -m "Hello world"') == ["git", "commit", "-m", "Hello world"]

    def test_single_quotes_keep_backslash(self):
        """Backslash is literal inside single quotes."""
        assert tokenize("echo 'a\\b'") == ["echo", "a\\b"]

    def test_backslash_in_double_quotes_escapes(self):
        """Backslash escapes the next character inside double quotes."""
        assert tokenize('echo "a\\"b"') == ["echo", 'a"b']

    def test_backslash_escapes_space(self):
        """An escaped space does not split."""
        assert tokenize("rm my\\ file") == ["rm", "my file"]

    def test_unterminated_quote_swallows_rest(self):
        """An open quote runs to the end without raising."""
        assert tokenize("echo 'unterminated rest") == ["echo", "unterminated rest"]

    def test_empty_quotes_are_a_token(self):
        assert tokenize("echo ''") == ["echo", ""]

    def test_tabs_and_newlines_split(self):
        assert tokenize("a\tb\nc") == ["a", "b", "c"]

    def test_empty_string(self):
        assert tokenize("") == []


class TestSplitSegments:
    """Tests for splitting on separators and operators."""

    def test_all_operators(self):
        """;, &&, ||, | all separate segments."""
        assert split_segments("a; b && c || d | e") == ["a", "b", "c", "d", "e"]

    def test_quoted_separator_is_not_split(self):
        assert split_segments('echo "a;b" && ls') == ['echo "a;b"', "ls"]

    def test_fd_redirect_is_not_background(self):
        """2>&1 is a redirect, not a background operator."""
        assert split_segments("ls 2>&1 | grep x") == ["ls 2>&1", "grep x"]

    def test_background_job_separates(self):
        assert split_segments("sleep 1 & rm x") == ["sleep 1", "rm x"]

    def test_substitution_is_not_split(self):
        assert split_segments("echo $(a; b) ; c") == ["echo $(a; b)", "c"]

    def test_newline_separates(self):
        assert split_segments("a\nb") == ["a", "b"]

    def test_pipe_stderr(self):
        assert split_segments("a |& b") == ["a", "b"]


class TestFindSubstitutions:
    """Tests for locating nested command text."""

    def test_dollar_paren(self):
        assert find_substitutions("echo $(yarn --version)") == ["yarn --version"]

    def test_backticks(self):
        assert find_substitutions("echo `yarn --version`") == ["yarn --version"]

    def test_arithmetic_is_skipped(self):
        assert find_substitutions("echo $((1 + 2))") == []

    def test_process_substitution(self):
        assert find_substitutions("diff <(ls a) <(ls b)") == ["ls a", "ls b"]

    def test_quotes_do_not_hide_substitution(self):
        """Substitutions are reported even inside quotes."""
        assert find_substitutions("echo '$(rm x)'") == ["rm x"]


class TestStripQuoted:
    """Tests for removing quoted literals."""

    def test_double_quoted_removed(self):
        assert strip_quoted('echo "not yarn install"') == "echo "

    def test_single_quoted_removed(self):
        assert strip_quoted("echo 'a' b") == "echo  b"

    def test_escaped_quote_inside_string(self):
        assert strip_quoted('echo "a\\"b" c') == "echo  c"


class TestExtractCommands:
    """Tests for extract_commands."""

    def test_simple_command(self):
        assert extract_commands("git status") == ["git"]

    def test_env_assignment_prefix(self):
        """Leading KEY=value tokens are skipped."""
        assert extract_commands("NODE_ENV=production yarn build") == ["yarn"]

    def test_compound_line(self):
        assert extract_commands("ls | grep foo && rm -rf x; echo done") == ["ls", "grep", "rm", "echo"]

    @pytest.mark.parametrize(
        "line, expected",
        [
            ("sudo rm -rf /", ["sudo", "rm"]),
            ("sudo -u root rm x", ["sudo", "rm"]),
            ("env FOO=1 BAR=2 rm x", ["env", "rm"]),
            ("nice -n 10 rm x", ["nice", "rm"]),
            ("timeout 10 rm x", ["timeout", "rm"]),
            ("timeout -s KILL 5 pkill node", ["timeout", "pkill"]),
            ("sudo env nohup rm x", ["sudo", "env", "nohup", "rm"]),
        ],
    )
    def test_wrappers(self, line, expected):
        """Wrappers reveal the command they run."""
        assert extract_commands(line) == expected

    def test_shell_dash_c(self):
        assert extract_commands('bash -c "rm -rf /tmp/x"') == ["bash", "rm"]

    def test_shell_combined_flags(self):
        """-lc counts as -c."""
        assert extract_commands("sh -lc 'kill 1'") == ["sh", "kill"]

    def test_shell_without_dash_c(self):
        assert extract_commands("bash script.sh") == ["bash"]

    def test_wrapper_then_shell(self):
        assert extract_commands("sudo bash -c 'dd if=/dev/zero of=x'") == ["sudo", "bash", "dd"]

    def test_xargs(self):
        assert extract_commands("find . -name '*.tmp' | xargs rm") == ["find", "xargs", "rm"]

    def test_xargs_flags_with_values(self):
        assert extract_commands("xargs -I {} rm {}") == ["xargs", "rm"]

    def test_xargs_is_one_level(self):
        """The command xargs runs is not itself unwound."""
        assert extract_commands("ls | xargs -n 1 sh -c 'rm x'") == ["ls", "xargs", "sh"]

    def test_dollar_substitution(self):
        assert extract_commands("echo $(yarn --version)") == ["echo", "yarn"]

    def test_backtick_substitution(self):
        assert extract_commands("echo `rm -rf /`") == ["echo", "rm"]

    def test_quoted_name_is_not_a_command(self):
        assert extract_commands('echo "rm -rf /"') == ["echo"]

    def test_subshell_group(self):
        assert extract_commands("(cd /tmp && rm x)") == ["cd", "rm"]

    def test_if_block(self):
        """Reserved words before a command are skipped."""
        assert extract_commands("if true; then rm x; fi") == ["true", "rm"]

    def test_for_loop_header(self):
        assert extract_commands("for f in a b; do rm $f; done") == ["rm"]

    def test_duplicates_removed(self):
        assert extract_commands("ls; ls; git status; ls") == ["ls", "git"]

    def test_dynamic_head_surfaces_inner_command(self):
        assert extract_commands("$(which rm) -rf x") == ["which"]

    def test_depth_cap(self):
        """Pathological nesting stops at the depth cap instead of recursing forever."""
        line = "$(" * 50 + "ls" + ")" * 50
        assert extract_commands(line) == []
        assert depth_exceeded(extract_invocations(line))
        assert ShellParser(max_depth=100).extract_commands(line) == ["ls"]

    def test_depth_cap_boundary(self):
        """32 nested substitutions are analysed; the 33rd level is marked, not dropped."""
        at_cap = "echo " + "$(" * 32 + "rm -rf /" + ")" * 32
        assert "rm" in extract_commands(at_cap)
        assert not depth_exceeded(extract_invocations(at_cap))

        over_cap = "echo " + "$(" * 33 + "rm -rf /" + ")" * 33
        invocations = extract_invocations(over_cap)
        assert depth_exceeded(invocations)
        assert invocations[-1].truncated
        assert invocations[-1].text.startswith("rm -rf /")

    @pytest.mark.parametrize("levels", [33, 5000])
    def test_deep_groups_are_marked(self, levels):
        line = "(" * levels + "rm x" + ")" * levels
        assert depth_exceeded(extract_invocations(line))

    def test_truncated_marker_is_not_a_command(self):
        line = "$(" * 40 + "ls" + ")" * 40
        assert extract_command_strings(line) == []

    def test_empty_input(self):
        assert extract_commands("") == []
        assert extract_commands("   ;  && ") == []


class TestExtractionProperties:
    """Properties that hold for any command line."""

    SAMPLES = [
        "rm -rf /",
        "ls | xargs kill",
        "git status && npm test",
        "echo $(yarn --version)",
        "NODE_ENV=prod yarn build",
        'bash -c "dd if=x of=y"',
    ]

    @pytest.mark.parametrize("line", SAMPLES)
    def test_sudo_wrapping(self, line):
        """Wrapping in sudo never hides a command."""
        assert set(extract_commands("sudo " + line)) >= set(extract_commands(line)) | {"sudo"}

    @pytest.mark.parametrize("shell", sorted(SHELL_COMMANDS))
    @pytest.mark.parametrize(
        "line",
        ["rm -rf /tmp/x", "git status && npm test", "ls | xargs kill -9", "echo $(yarn --version)"],
    )
    def test_shell_transparency(self, shell, line):
        """shell -c "X" exposes everything X exposes."""
        assert set(extract_commands(f'{shell} -c "{line}"')) >= set(extract_commands(line)) | {shell}

    @pytest.mark.parametrize("line", ["yarn --version", "rm -rf /", "git status && npm test", "ls | xargs kill"])
    def test_substitution_transparency(self, line):
        expected = set(extract_commands(line))
        assert set(extract_commands(f"echo $({line})")) >= expected
        assert set(extract_commands(f"echo `{line}`")) >= expected

    @pytest.mark.parametrize("line", SAMPLES)
    def test_deterministic_and_unique(self, line):
        first = extract_commands(line)
        assert extract_commands(line) == first
        assert len(first) == len(set(first))


class TestExtractCommandStrings:
    """Tests for per-invocation token lists."""

    def test_segments_with_arguments(self):
        assert extract_command_strings("npm install lodash && git status") == [
            ["npm", "install", "lodash"],
            ["git", "status"],
        ]

    def test_wrapped_invocation_listed(self):
        assert extract_command_strings("sudo npm install x") == [
            ["sudo", "npm", "install", "x"],
            ["npm", "install", "x"],
        ]

    def test_invocation_text_starts_at_command(self):
        invocations = extract_invocations("sudo rm -rf x")
        assert invocations[1].name == "rm"
        assert invocations[1].text == "rm -rf x"
        assert invocations[1].args == ("-rf", "x")

    def test_arg_text_keeps_quoting(self):
        invocation = extract_invocations("'yarn'  add \"left-pad\"")[0]
        assert invocation.name == "yarn"
        assert invocation.arg_text == 'add "left-pad"'
        assert extract_invocations("ls")[0].arg_text == ""


class TestGetParser:
    def test_builtin_default(self):
        assert type(get_parser()) is ShellParser

    def test_bashlex(self):
        from claw_hooks.parser_ast import BashlexParser

        assert isinstance(get_parser("bashlex"), BashlexParser)
