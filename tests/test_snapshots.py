"""Tests for deepclean.services.snapshot_service."""
import subprocess
import unittest
from unittest.mock import MagicMock, patch

from deepclean.core.models import LocalSnapshots
from deepclean.core.results import FailureKind, SkipReason, Status
from deepclean.services import snapshot_service
from deepclean.utils.prompt import assume_no, assume_yes

LIST_OUT = (
    "Snapshots for disk /:\n"
    "com.apple.TimeMachine.2024-05-01-101010.local\n"
    "com.apple.TimeMachine.2024-05-02-101010.local\n"
)
DATES_OUT = "Snapshot dates for all disks:\n2024-05-01-101010\n2024-05-02-101010\n"


def fake_tmutil(cmd, **kwargs):
    if cmd[1] == "listlocalsnapshots":
        return LIST_OUT
    if cmd[1] == "listlocalsnapshotdates":
        return DATES_OUT
    raise AssertionError(cmd)


@patch("deepclean.services.snapshot_service.subprocess.check_output", side_effect=fake_tmutil)
class TestListing(unittest.TestCase):
    def test_list_snapshots(self, _out) -> None:
        self.assertEqual(len(snapshot_service.list_snapshots("/")), 2)

    def test_list_dates_skips_header(self, _out) -> None:
        self.assertEqual(
            snapshot_service.list_snapshot_dates("/"), ["2024-05-01-101010", "2024-05-02-101010"]
        )


class TestMissingTmutil(unittest.TestCase):
    @patch("deepclean.services.snapshot_service.subprocess.check_output", side_effect=FileNotFoundError)
    def test_absent_tmutil_lists_nothing(self, _out) -> None:
        self.assertEqual(snapshot_service.list_snapshots(), [])
        result = snapshot_service.process_snapshots(LocalSnapshots())
        self.assertEqual(result.status, Status.ALREADY_CLEAN)

    @patch("deepclean.services.snapshot_service.subprocess.check_output",
           side_effect=subprocess.CalledProcessError(1, ["tmutil"]))
    def test_failing_tmutil_lists_nothing(self, _out) -> None:
        self.assertEqual(snapshot_service.list_snapshot_dates(), [])


@patch("deepclean.services.snapshot_service.subprocess.check_output", side_effect=fake_tmutil)
class TestProcessSnapshots(unittest.TestCase):
    @patch("deepclean.services.tools_service._run_cmd")
    def test_declined_deletes_nothing(self, run, _out) -> None:
        result = snapshot_service.process_snapshots(LocalSnapshots(), confirm=assume_no)
        self.assertEqual(result.reason, SkipReason.DECLINED)
        run.assert_not_called()

    @patch("deepclean.services.tools_service._run_cmd", return_value=(True, ""))
    def test_confirmed_once_for_whole_set(self, run, _out) -> None:
        confirm = MagicMock(return_value=True)
        result = snapshot_service.process_snapshots(LocalSnapshots(), confirm=confirm, use_sudo=False)
        confirm.assert_called_once()
        self.assertIn("2 snapshot(s)", confirm.call_args[0][0])
        self.assertEqual(run.call_count, 2)
        self.assertEqual(run.call_args_list[0][0][0], ["tmutil", "deletelocalsnapshots", "2024-05-01-101010"])
        self.assertEqual(result.status, Status.CLEANED)
        self.assertEqual(result.failures, [])

    @patch("deepclean.services.tools_service._run_cmd")
    def test_one_failure_does_not_block_the_rest(self, run, _out) -> None:
        run.side_effect = [(False, "busy"), (True, "")]
        result = snapshot_service.process_snapshots(LocalSnapshots(), confirm=assume_yes, use_sudo=False)
        self.assertEqual(run.call_count, 2)
        self.assertEqual(result.status, Status.CLEANED)
        self.assertEqual(result.detail, "1 of 2 snapshot(s) deleted")
        self.assertEqual(len(result.failures), 1)
        self.assertEqual(result.failures[0].kind, FailureKind.PARTIAL_DELETE_FAILURE)
        self.assertIn("2024-05-01-101010", result.failures[0].detail)

    @patch("deepclean.services.tools_service._run_cmd")
    def test_missing_dates_after_confirmation_is_reported(self, run, out) -> None:
        out.side_effect = lambda cmd, **kwargs: LIST_OUT if cmd[1] == "listlocalsnapshots" else ""
        result = snapshot_service.process_snapshots(LocalSnapshots(), confirm=assume_yes, use_sudo=False)
        run.assert_not_called()
        self.assertEqual(result.status, Status.SKIPPED)
        self.assertEqual(result.failures[0].kind, FailureKind.EXTERNAL_TOOL_FAILURE)
        self.assertEqual(result.detail, "2 snapshot(s) kept")

    @patch("deepclean.services.tools_service._run_cmd")
    def test_dry_run(self, run, _out) -> None:
        result = snapshot_service.process_snapshots(LocalSnapshots(), confirm=assume_yes, dry_run=True)
        self.assertEqual(result.reason, SkipReason.DRY_RUN)
        run.assert_not_called()
