import json
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import requests

from teams_callflow.cli.main import build_parser, main, options_from_args
from teams_callflow.tests.fixtures import audio, auto_attendant, option, snapshot, target, tts


def _write_snapshot(directory: str) -> str:
    aa = auto_attendant("aa-1", "Main Line",
                        [option("TransferCallToTarget", call_target=target("u-bob", "User"))],
                        greeting=tts("Welcome; please hold"), PhoneNumbers=["+15550100"])
    path = Path(directory) / "tenant.json"
    path.write_text(json.dumps(snapshot([aa])), encoding="utf-8")
    return str(path)


class CliHelpSmokeTests(unittest.TestCase):
    def test_cli_module_help_exits_zero(self) -> None:
        proc = subprocess.run(
            [sys.executable, "-m", "teams_callflow.cli.main", "--help"],
            capture_output=True,
            text=True,
            check=False,
        )
        self.assertEqual(proc.returncode, 0, msg=proc.stderr)
        self.assertIn("--snapshot", proc.stdout)


class CliRunTests(unittest.TestCase):
    def setUp(self) -> None:
        patcher = mock.patch.dict("os.environ", {}, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_flags_override_defaults(self) -> None:
        args = build_parser().parse_args(["--snapshot", "x.json", "--format", "dot", "--truncate", "8",
                                          "--hide-queue-settings"])
        options = options_from_args(args)
        self.assertEqual(options.output_format, "dot")
        self.assertEqual(options.truncate_greetings, 8)
        self.assertFalse(options.show_queue_settings)
        self.assertFalse(options.show_tts_text)

    def test_writes_mermaid_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            snapshot_path = _write_snapshot(td)
            out = Path(td) / "flow.mmd"
            code = main(["--snapshot", snapshot_path, "--identity", "aa-1", "--out", str(out), "--show-tts-text"])
            self.assertEqual(code, 0)
            text = out.read_text(encoding="utf-8")
        self.assertTrue(text.startswith("flowchart TD"))
        self.assertIn('incomingCall_aa_1(("Incoming Call At<br>+15550100"))', text)
        self.assertIn("Welcome, please hold", text)

    def test_missing_snapshot_exits_one(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            self.assertEqual(main(["--snapshot", str(Path(td) / "nope.json"), "--all"]), 1)

    def test_no_entry_points_exits_two(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            snapshot_path = _write_snapshot(td)
            self.assertEqual(main(["--snapshot", snapshot_path]), 2)
            self.assertEqual(main(["--snapshot", snapshot_path, "--name", "Unknown"]), 2)

    def test_unknown_format_from_environment_exits_one(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            snapshot_path = _write_snapshot(td)
            with mock.patch.dict("os.environ", {"TEAMS_CALLFLOW_OUTPUT_FORMAT": "svg"}):
                self.assertEqual(main(["--snapshot", snapshot_path, "--identity", "aa-1"]), 1)

    def test_unknown_format_from_options_file_exits_one(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            snapshot_path = _write_snapshot(td)
            options_path = Path(td) / "options.json"
            options_path.write_text(json.dumps({"output_format": "png"}), encoding="utf-8")
            code = main(["--snapshot", snapshot_path, "--identity", "aa-1", "--options", str(options_path)])
        self.assertEqual(code, 1)

    def test_out_directory_uses_title_file_name(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            snapshot_path = _write_snapshot(td)
            self.assertEqual(main(["--snapshot", snapshot_path, "--identity", "aa-1", "--format", "dot",
                                   "--out", td]), 0)
            written = Path(td) / "Main_Line.dot"
            self.assertTrue(written.read_text(encoding="utf-8").startswith("digraph G {"))


class CliAssetExportTests(unittest.TestCase):
    def setUp(self) -> None:
        patcher = mock.patch.dict("os.environ", {}, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_failed_download_leaves_no_link(self) -> None:
        aa = auto_attendant("aa1", "Main Line",
                            [option("Announcement", prompt=tts("We moved to 2 Main St"))],
                            greeting=audio("hello.wav", "https://files.example/hello.wav"))
        with tempfile.TemporaryDirectory() as td:
            snapshot_path = Path(td) / "tenant.json"
            snapshot_path.write_text(json.dumps(snapshot([aa])), encoding="utf-8")
            assets = Path(td) / "assets"
            out = Path(td) / "flow.mmd"
            with mock.patch("requests.Session.get", side_effect=requests.ConnectionError("boom")):
                with self.assertLogs("teams_callflow.export", level="WARNING"):
                    code = main(["--snapshot", str(snapshot_path), "--identity", "aa1", "--export-assets",
                                 "--assets-dir", str(assets), "--out", str(out)])
            self.assertEqual(code, 0)
            text = out.read_text(encoding="utf-8")
            self.assertEqual(sorted(p.name for p in assets.iterdir()), ["aa1_defaultCallFlowAnnouncement.txt"])

        clicks = [line.strip() for line in text.splitlines() if line.strip().startswith("click ")]
        self.assertEqual(len(clicks), 1)
        self.assertTrue(clicks[0].startswith("click defaultCallFlowAnnouncement_aa1 "))
        self.assertNotIn("hello.wav", "\n".join(clicks))


if __name__ == "__main__":
    unittest.main()
