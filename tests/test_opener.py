import asyncio
import shutil
import sys
import unittest

from core.errors import ExternalCommandError, InvalidArgumentError
from core.opener import DirectoryOpener, launch_process, reveal_command


class FakeLauncher:
    def __init__(self, returncode=0, stderr="", exc=None):
        self.calls = []
        self.returncode = returncode
        self.stderr = stderr
        self.exc = exc

    async def __call__(self, argv):
        self.calls.append(list(argv))
        if self.exc is not None:
            raise self.exc
        return self.returncode, self.stderr


class TestRevealCommand(unittest.TestCase):
    def test_windows(self):
        self.assertEqual(reveal_command("C:\\proj", "win32"), ["explorer", "C:\\proj"])

    def test_macos(self):
        self.assertEqual(reveal_command("/proj", "darwin"), ["open", "/proj"])

    def test_other_unix(self):
        self.assertEqual(reveal_command("/proj", "linux"), ["xdg-open", "/proj"])
        self.assertEqual(reveal_command("/proj", "freebsd13"), ["xdg-open", "/proj"])


class TestDirectoryOpener(unittest.TestCase):
    def test_success_message(self):
        launcher = FakeLauncher()
        opener = DirectoryOpener(platform="darwin", launcher=launcher)
        out = asyncio.run(opener.open("/tmp/demo"))
        self.assertEqual(out, "Successfully opened directory: /tmp/demo")
        self.assertEqual(launcher.calls, [["open", "/tmp/demo"]])

    def test_empty_path_launches_nothing(self):
        launcher = FakeLauncher()
        opener = DirectoryOpener(platform="linux", launcher=launcher)
        for bad in ("", None):
            with self.assertRaises(InvalidArgumentError):
                asyncio.run(opener.open(bad))
        self.assertEqual(launcher.calls, [])

    def test_nonzero_exit_is_external_command_error(self):
        launcher = FakeLauncher(returncode=4, stderr="gio: file does not exist")
        opener = DirectoryOpener(platform="linux", launcher=launcher)
        with self.assertRaises(ExternalCommandError) as ctx:
            asyncio.run(opener.open("/missing"))
        self.assertIn("Failed to open directory", str(ctx.exception))
        self.assertIn("gio: file does not exist", str(ctx.exception))

    def test_launch_failure_is_external_command_error(self):
        launcher = FakeLauncher(exc=FileNotFoundError(2, "No such file or directory", "xdg-open"))
        opener = DirectoryOpener(platform="linux", launcher=launcher)
        with self.assertRaises(ExternalCommandError) as ctx:
            asyncio.run(opener.open("/tmp"))
        self.assertIn("Failed to open directory", ctx.exception.message)

    def test_path_with_quote_is_a_single_argument(self):
        launcher = FakeLauncher()
        opener = DirectoryOpener(platform="linux", launcher=launcher)
        path = '/tmp/x" && rm -rf "/'
        asyncio.run(opener.open(path))
        self.assertEqual(launcher.calls, [["xdg-open", path]])


@unittest.skipIf(sys.platform == "win32" or shutil.which("sh") is None, "needs a POSIX shell")
class TestLaunchProcess(unittest.TestCase):
    def test_successful_command(self):
        self.assertEqual(asyncio.run(launch_process(["sh", "-c", "exit 0"])), (0, ""))

    def test_failing_command_reports_stderr(self):
        returncode, stderr = asyncio.run(launch_process(["sh", "-c", "echo boom >&2; exit 3"]))
        self.assertEqual(returncode, 3)
        self.assertEqual(stderr, "boom")

    def test_stdout_is_not_captured(self):
        self.assertEqual(asyncio.run(launch_process(["sh", "-c", "echo hidden"])), (0, ""))

    def test_missing_binary_is_external_command_error(self):
        async def missing(argv):
            return await launch_process(["no-such-reveal-command-xyz"] + argv[1:])

        opener = DirectoryOpener(platform="linux", launcher=missing)
        with self.assertRaises(ExternalCommandError) as ctx:
            asyncio.run(opener.open("/tmp"))
        self.assertTrue(ctx.exception.message.startswith("Failed to open directory: "))
        self.assertIn("no-such-reveal-command-xyz", ctx.exception.message)


if __name__ == '__main__':
    unittest.main()
