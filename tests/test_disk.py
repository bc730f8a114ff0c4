"""Tests for deepclean.utils.disk."""
import os
import tempfile
import unittest
from unittest.mock import patch

from deepclean.core.constants import GIB, KIB, MIB
from deepclean.core.results import FailureKind, FatalEnvironmentError
from deepclean.utils.disk import (
    disk_usage_line,
    format_bytes,
    free_space_bytes,
    measure_size,
)


def write_file(path, size):
    with open(path, "wb") as f:
        f.write(os.urandom(size))


class TestFormatBytes(unittest.TestCase):
    def test_zero(self) -> None:
        self.assertEqual(format_bytes(0), "0B")

    def test_tiers(self) -> None:
        self.assertEqual(format_bytes(1023), "1023B")
        self.assertEqual(format_bytes(KIB), "1KB")
        self.assertEqual(format_bytes(1536), "1KB")
        self.assertEqual(format_bytes(10 * MIB), "10.0MB")
        self.assertEqual(format_bytes(1073741824), "1.0GB")
        self.assertEqual(format_bytes(GIB + GIB // 2), "1.5GB")

    def test_never_rounds_into_next_tier(self) -> None:
        self.assertEqual(format_bytes(GIB - 1), "1023.9MB")
        self.assertEqual(format_bytes(MIB - 1), "1023KB")

    def test_very_large(self) -> None:
        self.assertEqual(format_bytes(5 * 1024 * GIB), "5120.0GB")
        self.assertTrue(format_bytes(2 ** 70).endswith("GB"))

    def test_negative_clamped(self) -> None:
        self.assertEqual(format_bytes(-5), "0B")

    def test_deterministic_and_monotonic_within_tier(self) -> None:
        prev = -1.0
        for n in range(MIB, 50 * MIB, 123457):
            s = format_bytes(n)
            self.assertEqual(s, format_bytes(n))
            value = float(s[:-2])
            self.assertGreaterEqual(value, prev)
            prev = value


class TestMeasureSize(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.root = self.tmp.name

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_missing_path_is_zero(self) -> None:
        failures = []
        self.assertEqual(measure_size(os.path.join(self.root, "nope"), failures), 0)
        self.assertEqual(failures, [])

    def test_counts_nested_files(self) -> None:
        sub = os.path.join(self.root, "a", "b")
        os.makedirs(sub)
        write_file(os.path.join(self.root, "a", "one.bin"), 256 * KIB)
        write_file(os.path.join(sub, "two.bin"), 256 * KIB)
        size = measure_size(self.root)
        self.assertGreaterEqual(size, 512 * KIB)
        self.assertLess(size, 512 * KIB + 128 * KIB)

    def test_hard_links_counted_once(self) -> None:
        first = os.path.join(self.root, "first.bin")
        write_file(first, 256 * KIB)
        single = measure_size(self.root)
        os.link(first, os.path.join(self.root, "second.bin"))
        self.assertEqual(measure_size(self.root), single)

    def test_symlink_not_followed(self) -> None:
        outside = tempfile.TemporaryDirectory()
        try:
            write_file(os.path.join(outside.name, "big.bin"), 512 * KIB)
            os.symlink(outside.name, os.path.join(self.root, "link"))
            self.assertLess(measure_size(self.root), 64 * KIB)
        finally:
            outside.cleanup()

    def test_unreadable_entries_are_soft_failures(self) -> None:
        write_file(os.path.join(self.root, "ok.bin"), 64 * KIB)
        real_lstat = os.lstat

        def flaky_lstat(p, *a, **kw):
            if p.endswith("ok.bin"):
                raise PermissionError(13, "Permission denied", p)
            return real_lstat(p, *a, **kw)

        failures = []
        with patch("deepclean.utils.disk.os.lstat", side_effect=flaky_lstat):
            size = measure_size(self.root, failures, "Label")
        self.assertLess(size, 64 * KIB)
        self.assertEqual(len(failures), 1)
        self.assertEqual(failures[0].kind, FailureKind.MEASUREMENT_FAILURE)
        self.assertEqual(failures[0].label, "Label")


class TestFreeSpace(unittest.TestCase):
    def test_reads_root(self) -> None:
        self.assertGreaterEqual(free_space_bytes("/"), 0)
        self.assertTrue(disk_usage_line("/").startswith("Disk: "))

    def test_unreadable_is_fatal(self) -> None:
        with self.assertRaises(FatalEnvironmentError):
            free_space_bytes("/definitely/not/a/mount/xyz")
