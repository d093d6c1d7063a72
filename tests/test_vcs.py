import pathlib
import sys
import unittest
from unittest import mock


ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from branchcheck import vcs
from branchcheck.errors import VcsError


LS_REMOTE = (
    "3f2a1c0d\trefs/heads/develop\n"
    "9e8d7c6b\trefs/heads/feature/PRJ-12\n"
    "\n"
    "0a1b2c3d\trefs/heads/hotfix/PRJ-9\n"
)


class GitAdapterTests(unittest.TestCase):
    def setUp(self):
        self.adapter = vcs.GitAdapter(pathlib.Path("/repo"))

    def test_current_branch_strips_newline(self):
        cp = mock.Mock(returncode=0, stdout="feature/PRJ-12\n", stderr="")
        with mock.patch("branchcheck.vcs._run", return_value=cp) as run:
            self.assertEqual(self.adapter.current_branch(), "feature/PRJ-12")
        run.assert_called_once_with(["git", "rev-parse", "--abbrev-ref", "HEAD"], cwd=pathlib.Path("/repo"))

    def test_current_branch_failure_raises(self):
        cp = mock.Mock(returncode=128, stdout="", stderr="fatal: not a git repository\n")
        with mock.patch("branchcheck.vcs._run", return_value=cp):
            with self.assertRaises(VcsError) as ctx:
                self.adapter.current_branch()
        self.assertIn("not a git repository", str(ctx.exception))
        self.assertIn("128", str(ctx.exception))

    def test_current_branch_empty_output_raises(self):
        cp = mock.Mock(returncode=0, stdout="\n", stderr="")
        with mock.patch("branchcheck.vcs._run", return_value=cp):
            with self.assertRaises(VcsError):
                self.adapter.current_branch()

    def test_remote_branch_names_strips_ref_prefix(self):
        cp = mock.Mock(returncode=0, stdout=LS_REMOTE, stderr="")
        with mock.patch("branchcheck.vcs._run", return_value=cp) as run:
            names = self.adapter.remote_branch_names()
        self.assertEqual(names, ["develop", "feature/PRJ-12", "hotfix/PRJ-9"])
        self.assertEqual(run.call_args[0][0], ["git", "ls-remote", "--heads"])

    def test_parse_remote_heads_rejects_garbage(self):
        with self.assertRaises(VcsError):
            vcs.parse_remote_heads("not-a-ref-line\n")
        with self.assertRaises(VcsError):
            vcs.parse_remote_heads("abc refs/tags/v1\n")

    def test_mutating_commands(self):
        cp = mock.Mock(returncode=0, stdout="", stderr="")
        with mock.patch("branchcheck.vcs._run", return_value=cp) as run:
            self.adapter.fetch()
            self.adapter.stash()
            self.adapter.checkout_branch("hotfix/PRJ-9")
        argvs = [call.args[0] for call in run.call_args_list]
        self.assertEqual(
            argvs,
            [
                ["git", "fetch"],
                ["git", "stash", "--include-untracked"],
                ["git", "checkout", "hotfix/PRJ-9"],
            ],
        )

    def test_checkout_failure_raises(self):
        cp = mock.Mock(returncode=1, stdout="", stderr="error: pathspec 'nope' did not match\n")
        with mock.patch("branchcheck.vcs._run", return_value=cp):
            with self.assertRaises(VcsError):
                self.adapter.checkout_branch("nope")

    def test_missing_git_binary_raises(self):
        with mock.patch("branchcheck.vcs._run", side_effect=FileNotFoundError("git")):
            with self.assertRaises(VcsError):
                self.adapter.fetch()

    def test_repo_root(self):
        cp = mock.Mock(returncode=0, stdout="/repo\n", stderr="")
        with mock.patch("branchcheck.vcs._run", return_value=cp):
            self.assertEqual(self.adapter.repo_root(), pathlib.Path("/repo").resolve())


class RunTests(unittest.TestCase):
    def test_run_disables_terminal_prompt(self):
        with mock.patch.dict("os.environ", {"PATH": "/usr/bin"}, clear=True), mock.patch(
            "branchcheck.vcs.subprocess.run"
        ) as run:
            vcs._run(["git", "status"], cwd=pathlib.Path("/repo"))
        kwargs = run.call_args.kwargs
        self.assertEqual(kwargs["cwd"], "/repo")
        self.assertFalse(kwargs["check"])
        self.assertTrue(kwargs["capture_output"])
        self.assertEqual(kwargs["env"]["GIT_TERMINAL_PROMPT"], "0")


if __name__ == "__main__":
    unittest.main()
