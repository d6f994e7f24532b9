import os
import sys
import unittest
from fastapi.testclient import TestClient

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from client import StrengthClient
from rest_api import StrengthAPI


class ClientTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_client.db"
        self.yaml_path = "test_client.yaml"
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)
        self.api = StrengthAPI(db_path=self.db_path, yaml_path=self.yaml_path)
        self.client = StrengthClient(
            base_url="http://testserver/", session=TestClient(self.api.app)
        )

    def tearDown(self) -> None:
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)

    def test_round_trip(self) -> None:
        profile = self.client.update_profile(gender="Female", weight_value=60, weight_unit="kg")
        self.assertEqual(profile["weight_value"], 60.0)
        rid = self.client.add_pr("Leg Curl", 45, date="2024-04-01")
        self.assertEqual(rid, 1)
        self.client.add_pr("Leg Extension", 55, date="2024-04-01")
        self.assertEqual(len(self.client.list_prs()), 2)

        levels = self.client.strength_levels()
        self.assertEqual({item["level"] for item in levels}, {"Intermediate", "Beginner"})
        self.assertEqual(self.client.thresholds("Leg Curl")["intermediate"], 45)

        findings = self.client.imbalances()["findings"]
        self.assertEqual(findings[2]["imbalance_type"], "Hamstring vs. Quad")
        self.assertEqual(findings[2]["imbalance_focus"], "Level Imbalance")


if __name__ == "__main__":
    unittest.main()
