import os
import sys
import unittest
from unittest import mock

from fastapi.testclient import TestClient

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
import client as client_module
from client import ProgressionClient
from rest_api import ProgressionAPI


class ClientTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_client.db"
        self.yaml_path = "test_client.yaml"
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)
        self.api = ProgressionAPI(db_path=self.db_path, yaml_path=self.yaml_path)
        self.patcher = mock.patch.object(
            client_module, "requests", TestClient(self.api.app)
        )
        self.patcher.start()
        self.client = ProgressionClient(base_url="http://testserver/")

    def tearDown(self) -> None:
        self.patcher.stop()
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)

    def test_workflow(self) -> None:
        data = self.client.log_workout(
            [{"exercise": "Row", "sets": 2, "reps": 10, "weight": 20, "minutes": 10}]
        )
        self.assertEqual(data["exp_gained"], 60)
        self.client.log_diet(1800, 40)
        self.client.log_weight(70, 15)
        self.assertEqual(self.client.complete_quest("dq1")["coins"], 15)
        progress = self.client.progress()
        self.assertEqual(progress["quests_open"], 2)
        self.assertEqual(self.api.engine.state.weights[0].body_fat, 15)

    def test_snapshot_roundtrip(self) -> None:
        self.client.log_weight(70)
        exported = self.client.export_snapshot()
        self.assertEqual(self.client.reset()["status"], "reset")
        self.assertEqual(self.api.engine.state.weights, [])
        self.assertEqual(self.client.import_snapshot(exported)["status"], "imported")
        self.assertEqual(len(self.api.engine.state.weights), 1)


if __name__ == "__main__":
    unittest.main()
