"""Tests for deepclean.services.tools_service."""
import subprocess
import unittest
from unittest.mock import patch

from deepclean.core.models import ExternalTool
from deepclean.services import tools_service as tools

NPM = ExternalTool(key="npm", label="npm cache cleaned", binaries=("npm",), args=("cache", "clean", "--force"))
PIP = ExternalTool(key="pip", label="pip cache purged", binaries=("pip3", "pip"), args=("cache", "purge"))
DOCKER = ExternalTool(
    key="docker", label="Docker pruned", binaries=("docker",), args=("system", "prune", "-af"), probe=("info",)
)
BREW = ExternalTool(
    key="brew",
    label="Homebrew cache cleaned",
    binaries=("brew",),
    args=("cleanup",),
    cache_query=("--cache",),
    cache_prefixes=("/Users/me/Library/Caches/Homebrew",),
)
BAD_STDERR = r"printf '\377\376 fail' >&2; exit 1"


class TestRunCmd(unittest.TestCase):
    def test_missing_command(self) -> None:
        ok, err = tools._run_cmd(["nonexistent_command_xyz"])
        self.assertFalse(ok)
        self.assertTrue(err)

    @patch("deepclean.services.tools_service.subprocess.run")
    def test_nonzero_exit_reports_stderr(self, mock_run) -> None:
        mock_run.side_effect = subprocess.CalledProcessError(1, ["x"], output="", stderr="boom\n")
        self.assertEqual(tools._run_cmd(["x"]), (False, "boom"))

    @patch("deepclean.services.tools_service.subprocess.run")
    def test_timeout(self, mock_run) -> None:
        mock_run.side_effect = subprocess.TimeoutExpired(["x"], 1)
        ok, _ = tools._run_cmd(["x"], timeout=1)
        self.assertFalse(ok)

    def test_undecodable_stderr(self) -> None:
        ok, err = tools._run_cmd(["sh", "-c", BAD_STDERR])
        self.assertFalse(ok)
        self.assertIn("fail", err)
        self.assertIn("\ufffd", err)


class TestDetect(unittest.TestCase):
    @patch("deepclean.services.tools_service.shutil.which", return_value=None)
    def test_absent(self, _which) -> None:
        self.assertIsNone(tools.detect(NPM))

    @patch("deepclean.services.tools_service.shutil.which")
    def test_first_available_candidate_wins(self, which) -> None:
        which.side_effect = lambda name: "/usr/bin/pip" if name == "pip" else None
        self.assertEqual(tools.detect(PIP), "/usr/bin/pip")

    @patch("deepclean.services.tools_service._run_cmd", return_value=(False, "daemon not running"))
    @patch("deepclean.services.tools_service.shutil.which", return_value="/usr/local/bin/docker")
    def test_failing_probe_means_absent(self, _which, run) -> None:
        self.assertIsNone(tools.detect(DOCKER))
        self.assertEqual(run.call_args[0][0], ["/usr/local/bin/docker", "info"])

    @patch("deepclean.services.tools_service._run_cmd", return_value=(True, ""))
    @patch("deepclean.services.tools_service.shutil.which", return_value="/usr/local/bin/docker")
    def test_passing_probe(self, _which, _run) -> None:
        self.assertEqual(tools.detect(DOCKER), "/usr/local/bin/docker")


class TestInvoke(unittest.TestCase):
    @patch("deepclean.services.tools_service._run_cmd", return_value=(True, ""))
    def test_success(self, run) -> None:
        outcome = tools.invoke(NPM, "/usr/bin/npm")
        self.assertTrue(outcome.ok)
        self.assertEqual(run.call_args[0][0], ["/usr/bin/npm", "cache", "clean", "--force"])

    @patch("deepclean.services.tools_service._run_cmd", return_value=(False, "line1\nEACCES"))
    def test_failure_is_outcome_not_exception(self, _run) -> None:
        outcome = tools.invoke(NPM, "/usr/bin/npm")
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.detail, "EACCES")

    @patch("deepclean.services.tools_service.is_root", return_value=False)
    @patch("deepclean.services.tools_service._run_cmd", return_value=(True, ""))
    def test_sudo_prefix(self, run, _root) -> None:
        tool = ExternalTool(key="dns", label="DNS", binaries=("dscacheutil",), args=("-flushcache",), sudo=True)
        tools.invoke(tool, "/usr/bin/dscacheutil")
        self.assertEqual(run.call_args[0][0], ["sudo", "/usr/bin/dscacheutil", "-flushcache"])
        tools.invoke(tool, "/usr/bin/dscacheutil", use_sudo=False)
        self.assertEqual(run.call_args[0][0], ["/usr/bin/dscacheutil", "-flushcache"])


class TestResolveCacheDir(unittest.TestCase):
    def test_no_query(self) -> None:
        self.assertIsNone(tools.resolve_cache_dir(NPM, "/usr/bin/npm"))

    @patch("deepclean.services.tools_service.subprocess.check_output")
    def test_accepts_known_prefix(self, out) -> None:
        out.return_value = "/Users/me/Library/Caches/Homebrew\n"
        self.assertEqual(
            tools.resolve_cache_dir(BREW, "/opt/homebrew/bin/brew"), "/Users/me/Library/Caches/Homebrew"
        )

    @patch("deepclean.services.tools_service.subprocess.check_output")
    def test_rejects_unknown_prefix(self, out) -> None:
        out.return_value = "/Users/me\n"
        self.assertIsNone(tools.resolve_cache_dir(BREW, "/opt/homebrew/bin/brew"))

    @patch("deepclean.services.tools_service.subprocess.check_output")
    def test_empty_output(self, out) -> None:
        out.return_value = "\n"
        self.assertIsNone(tools.resolve_cache_dir(BREW, "/opt/homebrew/bin/brew"))

    @patch("deepclean.services.tools_service.subprocess.check_output")
    def test_query_failure(self, out) -> None:
        out.side_effect = subprocess.CalledProcessError(1, ["brew"])
        self.assertIsNone(tools.resolve_cache_dir(BREW, "/opt/homebrew/bin/brew"))

    def test_undecodable_output_is_rejected_not_raised(self) -> None:
        tool = ExternalTool(
            key="odd",
            label="odd cache",
            binaries=("sh",),
            args=(),
            cache_query=("-c", r"printf '/var/empty/\377'"),
            cache_prefixes=("/opt/odd",),
        )
        self.assertIsNone(tools.resolve_cache_dir(tool, "sh"))
