import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import requests

from teams_callflow.errors import DirectoryError, NotFoundError, SnapshotError
from teams_callflow.lookup.graph_directory import GraphDirectory
from teams_callflow.lookup.snapshot import SnapshotLookup, load_snapshot
from teams_callflow.models.tenant import AutoAttendant, CallQueue, DirectoryGroup
from teams_callflow.tests.fixtures import auto_attendant, call_queue, lookup, option, snapshot


def _response(status_code, payload=None):
    resp = mock.Mock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


class SnapshotLookupTests(unittest.TestCase):
    def setUp(self) -> None:
        self.lookup = lookup(
            [auto_attendant("aa-1", "Main Line", [option("DisconnectCall")], ApplicationInstances=["ra-1"])],
            [call_queue("cq-1", "Sales", ["u-alice"], ApplicationInstances=["ra-2"])],
        )

    def test_voice_app_by_identity_or_name(self) -> None:
        self.assertIsInstance(self.lookup.get_voice_app("aa-1"), AutoAttendant)
        self.assertIsInstance(self.lookup.get_voice_app("Sales"), CallQueue)
        with self.assertRaises(NotFoundError):
            self.lookup.get_voice_app("nobody")

    def test_application_instance_owner(self) -> None:
        self.assertEqual(self.lookup.find_owner_of_application_instance("ra-2").identity, "cq-1")
        with self.assertRaises(NotFoundError):
            self.lookup.find_owner_of_application_instance("ra-9")

    def test_directory_fallback_is_cached(self) -> None:
        directory = mock.Mock()
        directory.get_group.return_value = DirectoryGroup(id="g-x", display_name="Remote Group")
        tenant = SnapshotLookup.from_dict(snapshot(), directory)
        self.assertEqual(tenant.get_group("g-x").display_name, "Remote Group")
        tenant.get_group("g-x")
        directory.get_group.assert_called_once_with("g-x")
        self.assertEqual(tenant.get_group("g-support").display_name, "Support Voicemail")

    def test_missing_user_without_directory(self) -> None:
        with self.assertRaises(NotFoundError):
            self.lookup.get_user("u-ghost")


class SnapshotFileTests(unittest.TestCase):
    def test_load_with_byte_order_mark(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "tenant.json"
            path.write_text(json.dumps(snapshot()), encoding="utf-8-sig")
            self.assertEqual(len(load_snapshot(str(path)).users), 3)

    def test_bad_files_raise_snapshot_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            broken = Path(td) / "broken.json"
            broken.write_text("{not json", encoding="utf-8")
            with self.assertRaises(SnapshotError):
                load_snapshot(str(broken))
            wrong = Path(td) / "wrong.json"
            wrong.write_text(json.dumps({"AutoAttendants": [{"Name": "no identity"}]}), encoding="utf-8")
            with self.assertRaises(SnapshotError):
                load_snapshot(str(wrong))
            with self.assertRaises(SnapshotError):
                load_snapshot(str(Path(td) / "missing.json"))


class GraphDirectoryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = mock.Mock()
        self.directory = GraphDirectory(session=self.session, base_url="https://graph.example/v1.0")

    def test_requires_token_or_session(self) -> None:
        with self.assertRaises(ValueError):
            GraphDirectory()

    def test_token_sets_bearer_header(self) -> None:
        directory = GraphDirectory(token="abc")
        self.assertEqual(directory.session.headers["Authorization"], "Bearer abc")

    def test_user_uses_first_business_phone(self) -> None:
        self.session.get.return_value = _response(
            200, {"id": "u-1", "displayName": "Dana", "businessPhones": ["+15551111", "+15552222"]}
        )
        user = self.directory.get_user("u-1")
        self.assertEqual((user.display_name, user.phone_number), ("Dana", "+15551111"))
        url = self.session.get.call_args[0][0]
        self.assertEqual(url, "https://graph.example/v1.0/users/u-1")

        self.directory.get_user("u-1")
        self.assertEqual(self.session.get.call_count, 1)

    def test_not_found(self) -> None:
        self.session.get.return_value = _response(404)
        with self.assertRaises(NotFoundError):
            self.directory.get_group("g-missing")

    def test_server_error_and_transport_error(self) -> None:
        self.session.get.return_value = _response(503)
        with self.assertRaises(DirectoryError) as ctx:
            self.directory.get_group("g-1")
        self.assertEqual(ctx.exception.status_code, 503)

        self.session.get.side_effect = requests.ConnectionError("offline")
        with self.assertRaises(DirectoryError):
            self.directory.get_channel("t-1", "c-1")

    def test_channel(self) -> None:
        self.session.get.return_value = _response(200, {"id": "c-1", "displayName": "General"})
        channel = self.directory.get_channel("t-1", "c-1")
        self.assertEqual((channel.team_id, channel.display_name), ("t-1", "General"))


if __name__ == "__main__":
    unittest.main()
