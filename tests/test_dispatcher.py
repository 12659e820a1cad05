"""
Unit tests for the Dispatcher
Path: tests/test_dispatcher.py
"""

import unittest
from pathlib import Path
from unittest.mock import patch

from ctx_switcher.context import ConfigRoot, Context, EnvDefinition
from ctx_switcher.dispatcher import Dispatcher, handle_edit
from ctx_switcher.exceptions import (
    ActivePathMismatchError,
    ContextNotFoundError,
    LaunchError,
    NoCommandError,
    NoShellError,
    ResolutionError,
    UserError,
)
from ctx_switcher.execution import env_list_to_dict


def make_config(shell=None, path=None):
    return ConfigRoot(
        shell=shell,
        path=path,
        contexts=(
            Context(
                name="dev",
                prompt="(dev) ",
                environments=(EnvDefinition(name="TOKEN", source="abc"),),
                contexts=(
                    Context(name="db", environments=(EnvDefinition(name="DB", source="pg"),)),
                    Context(name="cache", prompt="(cache) "),
                ),
            ),
            Context(name="prod", environments=(EnvDefinition(name="BROKEN", source="x", kind="nope"),)),
        ),
    )


class TestDispatcher(unittest.TestCase):
    """Test cases for the Dispatcher class"""

    def setUp(self):
        """Set up test fixtures"""
        self.config = make_config()
        self.idle = {"SHELL": "/bin/sh", "HOME": "/home/u"}
        self.in_dev = dict(self.idle, CTX_ACTIVE="dev")

    @patch("ctx_switcher.dispatcher.launch")
    def test_set_from_idle(self, mock_launch):
        """set dev spawns the shell with TOKEN=abc and CTX_ACTIVE=dev"""
        mock_launch.return_value = 0

        code = Dispatcher(self.config, self.idle).handle_set("dev")

        self.assertEqual(code, 0)
        argv, env = mock_launch.call_args[0]
        self.assertEqual(argv, ["/bin/sh"])
        self.assertIn("TOKEN=abc", env)
        self.assertEqual(env[-1], "CTX_ACTIVE=dev")

    @patch("ctx_switcher.dispatcher.launch")
    def test_set_nested(self, mock_launch):
        """set db from inside dev descends to dev,db"""
        mock_launch.return_value = 0

        Dispatcher(self.config, self.in_dev).handle_set("db")

        argv, env = mock_launch.call_args[0]
        self.assertEqual(env[-1], "CTX_ACTIVE=dev,db")
        self.assertEqual(env_list_to_dict(env)["DB"], "pg")

    @patch("ctx_switcher.dispatcher.launch")
    def test_set_propagates_exit_code(self, mock_launch):
        mock_launch.return_value = 42
        self.assertEqual(Dispatcher(self.config, self.idle).handle_set("dev"), 42)

    @patch("ctx_switcher.dispatcher.launch")
    def test_set_only_sees_children_of_active_context(self, mock_launch):
        with self.assertRaises(ContextNotFoundError) as context:
            Dispatcher(self.config, self.in_dev).handle_set("prod")
        self.assertIn("context prod not found", str(context.exception))
        mock_launch.assert_not_called()

    @patch("ctx_switcher.dispatcher.launch")
    def test_set_is_case_sensitive(self, mock_launch):
        with self.assertRaises(ContextNotFoundError):
            Dispatcher(self.config, self.idle).handle_set("DEV")

    @patch("ctx_switcher.dispatcher.launch")
    def test_configured_shell_and_its_assignments(self, mock_launch):
        mock_launch.return_value = 0
        config = make_config(shell="HISTFILE=/tmp/h zsh -l")

        Dispatcher(config, self.idle).handle_set("dev")

        argv, env = mock_launch.call_args[0]
        self.assertEqual(argv, ["zsh", "-l"])
        self.assertEqual(env[-2:], ["HISTFILE=/tmp/h", "CTX_ACTIVE=dev"])

    @patch("ctx_switcher.dispatcher.launch")
    def test_no_shell(self, mock_launch):
        with self.assertRaises(NoShellError):
            Dispatcher(self.config, {}).handle_set("dev")
        mock_launch.assert_not_called()

    @patch("ctx_switcher.dispatcher.launch")
    def test_resolution_failure_spawns_nothing(self, mock_launch):
        with self.assertRaises(ResolutionError):
            Dispatcher(self.config, self.idle).handle_set("prod")
        mock_launch.assert_not_called()

    @patch("ctx_switcher.dispatcher.launch")
    def test_stale_active_path(self, mock_launch):
        """An active path from another configuration is an internal error"""
        environ = dict(self.idle, CTX_ACTIVE="gone")
        with self.assertRaises(ActivePathMismatchError):
            Dispatcher(self.config, environ).handle_set("db")
        mock_launch.assert_not_called()

    @patch("ctx_switcher.dispatcher.launch")
    @patch("ctx_switcher.dispatcher.capture_output")
    def test_set_without_id_uses_picker(self, mock_capture, mock_launch):
        mock_capture.return_value = "dev"
        mock_launch.return_value = 0
        config = make_config(path=Path("/tmp/ctx.hcl"))

        Dispatcher(config, self.idle, program="ctx").handle_set()

        argv, env = mock_capture.call_args[0]
        self.assertEqual(argv, ["fzf", "--ansi", "--no-preview"])
        self.assertEqual(env[-1], "FZF_DEFAULT_COMMAND=ctx --config /tmp/ctx.hcl list")
        self.assertEqual(mock_launch.call_args[0][1][-1], "CTX_ACTIVE=dev")

    @patch("ctx_switcher.dispatcher.capture_output")
    def test_picker_cancelled(self, mock_capture):
        mock_capture.side_effect = LaunchError("command fzf failed with exit code 130", returncode=130)
        with self.assertRaises(UserError):
            Dispatcher(self.config, self.idle).handle_set()

    @patch("ctx_switcher.dispatcher.capture_output")
    def test_picker_empty_selection(self, mock_capture):
        mock_capture.return_value = ""
        with self.assertRaises(UserError):
            Dispatcher(self.config, self.idle).handle_set()

    @patch("ctx_switcher.dispatcher.launch")
    def test_exec_runs_command_unwrapped(self, mock_launch):
        mock_launch.return_value = 7

        code = Dispatcher(self.config, self.in_dev).handle_exec("cache", ["env", "-0"])

        self.assertEqual(code, 7)
        argv, env = mock_launch.call_args[0]
        self.assertEqual(argv, ["env", "-0"])
        self.assertEqual(env[-1], "CTX_ACTIVE=dev,cache")

    @patch("ctx_switcher.dispatcher.launch")
    def test_exec_requires_command(self, mock_launch):
        with self.assertRaises(NoCommandError):
            Dispatcher(self.config, self.idle).handle_exec("dev", [])
        mock_launch.assert_not_called()

    def test_exec_unknown_context(self):
        with self.assertRaises(ContextNotFoundError):
            Dispatcher(self.config, self.idle).handle_exec("nope", ["true"])

    def test_prompt(self):
        self.assertEqual(Dispatcher(self.config, self.idle).handle_prompt(), "")
        self.assertEqual(Dispatcher(self.config, self.in_dev).handle_prompt(), "(dev) ")
        self.assertEqual(Dispatcher(self.config, {"CTX_ACTIVE": "dev,cache"}).handle_prompt(), "(cache) ")
        self.assertEqual(Dispatcher(self.config, {"CTX_ACTIVE": "dev,db"}).handle_prompt(), "")

    def test_prompt_swallows_stale_path(self):
        self.assertEqual(Dispatcher(self.config, {"CTX_ACTIVE": "dev,gone"}).handle_prompt(), "")

    def test_list(self):
        self.assertEqual(Dispatcher(self.config, self.idle).handle_list(), ["dev", "prod"])
        self.assertEqual(Dispatcher(self.config, self.in_dev).handle_list(), ["db", "cache"])
        self.assertEqual(Dispatcher(self.config, {"CTX_ACTIVE": "dev,db"}).handle_list(), [])
        self.assertEqual(Dispatcher(self.config, {"CTX_ACTIVE": "gone"}).handle_list(), [])


class TestEdit(unittest.TestCase):
    """Test cases for handle_edit"""

    @patch("ctx_switcher.dispatcher.launch")
    def test_edit_opens_editor(self, mock_launch):
        mock_launch.return_value = 0
        code = handle_edit("/tmp/ctx.hcl", {"EDITOR": "vim"})
        self.assertEqual(code, 0)
        argv, env = mock_launch.call_args[0]
        self.assertEqual(argv, ["vim", "/tmp/ctx.hcl"])
        self.assertIn("EDITOR=vim", env)

    @patch("ctx_switcher.dispatcher.launch")
    def test_edit_with_editor_arguments(self, mock_launch):
        mock_launch.return_value = 0
        handle_edit("/tmp/ctx.hcl", {"EDITOR": "code --wait"})
        self.assertEqual(mock_launch.call_args[0][0], ["code", "--wait", "/tmp/ctx.hcl"])

    def test_edit_without_editor(self):
        with self.assertRaises(UserError):
            handle_edit("/tmp/ctx.hcl", {})


if __name__ == "__main__":
    unittest.main()
