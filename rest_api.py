import time
from typing import Optional
from fastapi import FastAPI, HTTPException, Response, Body, APIRouter, Request

from db import PersonalRecordRepository, ProfileRepository, SettingsRepository
from algorithms.imbalance_detector import ImbalanceDetector
from strength_service import StrengthService, group_by_category
from insight_service import InsightService, InsightUnavailableError
from algorithms.strength_standards import (
    STRENGTH_STANDARDS,
    classified_exercises,
)


class RateLimiter:
    """Simple in-memory rate limiter."""

    def __init__(self, limit: int = 60, window: int = 60) -> None:
        self.limit = limit
        self.window = window
        self.requests: dict[str, list[float]] = {}

    async def __call__(self, request: Request, call_next):
        ip = request.client.host if request.client else "anon"
        now = time.time()
        history = [t for t in self.requests.get(ip, []) if now - t < self.window]
        if len(history) >= self.limit:
            return Response("rate limit exceeded", status_code=429)
        history.append(now)
        self.requests[ip] = history
        return await call_next(request)


class StrengthAPI:
    """Provides REST endpoints for personal records and strength analysis."""

    def __init__(
        self,
        db_path: str = "strength.db",
        yaml_path: str = "settings.yaml",
        *,
        rate_limit: int | None = None,
        rate_window: int = 60,
        insights: InsightService | None = None,
    ) -> None:
        self.db_path = db_path
        self.settings = SettingsRepository(db_path, yaml_path)
        self.records = PersonalRecordRepository(db_path)
        self.profiles = ProfileRepository(db_path)
        self.strength = StrengthService(self.records, self.profiles, self.settings)
        self.insights = insights
        self.app = FastAPI(
            title="Strength API",
            description="REST API for personal records and strength balance analysis",
        )
        if rate_limit is not None:
            limiter = RateLimiter(limit=rate_limit, window=rate_window)
            self.app.middleware("http")(limiter)
        self._setup_routes()

    def _insight_service(self) -> InsightService:
        if self.insights is not None:
            return self.insights
        return InsightService.from_settings(
            self.settings, ImbalanceDetector(self.strength.classifier())
        )

    def _setup_routes(self) -> None:
        prs_router = APIRouter(prefix="/prs", tags=["Personal Records"])
        strength_router = APIRouter(prefix="/strength", tags=["Strength"])

        @self.app.get(
            "/health",
            summary="Health check",
            description="Verify API and database connectivity.",
        )
        def health():
            """Return API and database connection status."""
            try:
                self.records.fetch_all("SELECT 1;")
                return {"status": "ok"}
            except Exception as e:  # pragma: no cover - connectivity failure
                raise HTTPException(status_code=500, detail=str(e))

        @self.app.get("/profile")
        def get_profile():
            return self.profiles.fetch().model_dump()

        @self.app.put("/profile")
        def update_profile(fields: dict = Body(...)):
            try:
                profile = self.profiles.update(**fields)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return profile.model_dump()

        @prs_router.post("")
        def add_pr(
            exercise_name: str,
            weight: float,
            weight_unit: str = "kg",
            date: Optional[str] = None,
            category: str = "Other",
        ):
            try:
                rid = self.records.add(exercise_name, weight, weight_unit, date, category)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"id": rid}

        @prs_router.get("")
        def list_prs(start_date: Optional[str] = None, end_date: Optional[str] = None):
            return [
                r.model_dump(mode="json")
                for r in self.records.fetch_all_records(start_date, end_date)
            ]

        @prs_router.get("/best")
        def best_prs(grouped: bool = False):
            best = self.strength.best_records()
            if grouped:
                return {
                    cat: [r.model_dump(mode="json") for r in items]
                    for cat, items in group_by_category(best).items()
                }
            return [r.model_dump(mode="json") for r in best]

        @prs_router.put("/{record_id}")
        def update_pr(record_id: int, weight: float, date: Optional[str] = None):
            try:
                self.records.update(record_id, weight, date)
            except ValueError as e:
                status = 404 if "not found" in str(e) else 400
                raise HTTPException(status_code=status, detail=str(e))
            return {"status": "updated"}

        @prs_router.delete("/{record_id}")
        def delete_pr(record_id: int):
            try:
                self.records.delete(record_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return {"status": "deleted"}

        @strength_router.get("/levels")
        def strength_levels():
            return self.strength.levels()

        @strength_router.get("/thresholds/{exercise}")
        def strength_thresholds(exercise: str, unit: Optional[str] = None):
            if unit is not None and unit not in ("kg", "lbs"):
                raise HTTPException(status_code=400, detail="unit must be kg or lbs")
            result = self.strength.thresholds(exercise, unit)
            if result is None:
                raise HTTPException(
                    status_code=404,
                    detail="no standard for exercise or profile data missing",
                )
            return result

        @strength_router.get("/imbalances")
        def strength_imbalances():
            return self.strength.balance()

        @strength_router.post("/insights")
        def strength_insights():
            records, profile = self.records.fetch_all_records(), self.profiles.fetch()
            try:
                return self._insight_service().analyze(records, profile)
            except InsightUnavailableError as e:
                raise HTTPException(status_code=503, detail=str(e))

        @self.app.get("/exercises/standards")
        def list_standards():
            return [
                {
                    "exercise": name,
                    "type": STRENGTH_STANDARDS[name].base_type,
                    "category": STRENGTH_STANDARDS[name].category.value,
                }
                for name in classified_exercises()
            ]

        self.app.include_router(prs_router)
        self.app.include_router(strength_router)


def create_app(db_path: str = "strength.db", yaml_path: str = "settings.yaml") -> FastAPI:
    return StrengthAPI(db_path=db_path, yaml_path=yaml_path).app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app())
