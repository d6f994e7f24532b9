import requests
from typing import Optional


class StrengthClient:
    """Simple REST client for the strength API."""

    def __init__(self, base_url: str = "http://localhost:8000", session=None) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def add_pr(
        self,
        exercise_name: str,
        weight: float,
        weight_unit: str = "kg",
        date: Optional[str] = None,
    ) -> int:
        params = {"exercise_name": exercise_name, "weight": weight, "weight_unit": weight_unit}
        if date:
            params["date"] = date
        resp = self.session.post(f"{self.base_url}/prs", params=params)
        resp.raise_for_status()
        return resp.json()["id"]

    def list_prs(self, **params: str):
        resp = self.session.get(f"{self.base_url}/prs", params=params)
        resp.raise_for_status()
        return resp.json()

    def update_profile(self, **fields) -> dict:
        resp = self.session.put(f"{self.base_url}/profile", json=fields)
        resp.raise_for_status()
        return resp.json()

    def strength_levels(self) -> list:
        resp = self.session.get(f"{self.base_url}/strength/levels")
        resp.raise_for_status()
        return resp.json()

    def thresholds(self, exercise: str, unit: Optional[str] = None) -> dict:
        params = {"unit": unit} if unit else {}
        resp = self.session.get(f"{self.base_url}/strength/thresholds/{exercise}", params=params)
        resp.raise_for_status()
        return resp.json()

    def imbalances(self) -> dict:
        resp = self.session.get(f"{self.base_url}/strength/imbalances")
        resp.raise_for_status()
        return resp.json()
