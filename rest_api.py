import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Body, FastAPI, HTTPException, Request, Response

from config import APP_VERSION, YamlConfig
from db import SnapshotRepository
from engine import OperationResult, ProgressionEngine
from errors import InvalidFormatError
from localization import Translator
from snapshot import ExportedSnapshot, SnapshotCodec
from stats_service import StatisticsService

logger = logging.getLogger(__name__)


class ProgressionAPI:
    """Provides REST endpoints for activity logging and character progress."""

    def __init__(
        self,
        db_path: str | None = None,
        yaml_path: str = "settings.yaml",
    ) -> None:
        self.config = YamlConfig(yaml_path).settings()
        self.db_path = db_path or self.config.db_path
        self.snapshots = SnapshotRepository(self.db_path)
        self.engine = ProgressionEngine.open(self.snapshots, self.config.storage_key)
        self.statistics = StatisticsService()
        self.translator = Translator()
        self.translator.set_language(self.config.language)
        self.app = FastAPI(
            title="Progression API",
            description="REST API turning logged activities into character progress",
            version=APP_VERSION,
        )
        self._setup_routes()

    def _result(self, result: OperationResult) -> dict:
        state = result.state
        return {
            "changed": result.changed,
            "exp_gained": result.exp_gained,
            "level": state.level,
            "exp": state.exp,
            "next_level_exp": state.next_level_exp,
            "coins": state.coins,
            "events": [e.to_dict() for e in result.events],
            "notifications": [
                dict(zip(("title", "description"), self.translator.notification(e)))
                for e in result.events
            ],
        }

    @staticmethod
    def _attachment(snapshot: ExportedSnapshot) -> Response:
        return Response(
            content=snapshot.data,
            media_type="application/json",
            headers={
                "Content-Disposition": f"attachment; filename={snapshot.filename}"
            },
        )

    def _setup_routes(self) -> None:
        snapshot_router = APIRouter(prefix="/snapshot", tags=["Snapshot"])
        quests_router = APIRouter(prefix="/quests", tags=["Quests"])

        @self.app.get(
            "/health",
            summary="Health check",
            description="Verify API and database connectivity.",
        )
        def health():
            """Return API and database connection status."""
            try:
                self.snapshots.keys()
                return {"status": "ok"}
            except Exception as e:  # pragma: no cover - connectivity failure
                raise HTTPException(status_code=500, detail=str(e))

        @self.app.get("/state")
        def get_state():
            return SnapshotCodec.to_document(self.engine.state)

        @self.app.get("/progress")
        def get_progress():
            return self.statistics.progress(self.engine.state)

        @self.app.post("/workouts")
        def log_workout(items: List[Dict] = Body(...)):
            try:
                result = self.engine.log_workout(items)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"id": result.record.id, **self._result(result)}

        @self.app.get("/workouts")
        def list_workouts():
            return [
                w.model_dump(mode="json", by_alias=True)
                for w in self.engine.state.workouts
            ]

        @self.app.post("/diet")
        def log_diet(
            calories: float,
            protein: float,
            carbs: float = 0.0,
            fat: float = 0.0,
        ):
            try:
                result = self.engine.log_diet(calories, protein, carbs, fat)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"id": result.record.id, **self._result(result)}

        @self.app.get("/diet")
        def list_diet():
            return [
                d.model_dump(mode="json", by_alias=True) for d in self.engine.state.diet
            ]

        @self.app.post("/weights")
        def log_weight(weight: float, body_fat: Optional[float] = None):
            try:
                result = self.engine.log_weight(weight, body_fat)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return self._result(result)

        @self.app.get("/weights/trend")
        def weight_trend(unit: Optional[str] = None):
            try:
                return self.statistics.weight_trend(
                    self.engine.state, unit or self.config.weight_unit
                )
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @self.app.post("/photos")
        async def add_photo(request: Request, media_type: Optional[str] = None):
            image = await request.body()
            if not image:
                raise HTTPException(status_code=400, detail="image body required")
            try:
                result = self.engine.log_photo(image, media_type)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"id": result.record.id, **self._result(result)}

        @self.app.get("/photos")
        def list_photos():
            return [
                {"id": p.id, "date": p.date.isoformat(), "media_type": p.media_type}
                for p in self.engine.state.photos
            ]

        @self.app.get("/photos/{photo_id}")
        def get_photo(photo_id: str):
            for p in self.engine.state.photos:
                if p.id == photo_id:
                    return Response(content=p.image, media_type=p.media_type)
            raise HTTPException(status_code=404, detail="photo not found")

        @self.app.get("/inventory")
        def list_inventory():
            return list(self.engine.state.inventory)

        @self.app.get("/settings")
        def get_settings():
            return self.engine.state.settings.model_dump(by_alias=True)

        @self.app.put("/settings")
        def update_settings(changes: Dict = Body(...)):
            try:
                self.engine.update_settings(**changes)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return self.engine.state.settings.model_dump(by_alias=True)

        @quests_router.get("")
        def list_quests():
            return [
                q.model_dump(by_alias=True, exclude_none=True)
                for q in self.engine.state.quests
            ]

        @quests_router.post("/{quest_id}/complete")
        def complete_quest(quest_id: str):
            if self.engine.state.find_quest(quest_id) is None:
                raise HTTPException(status_code=404, detail="quest not found")
            return self._result(self.engine.complete_quest(quest_id))

        @snapshot_router.get("/export")
        def export_snapshot():
            return self._attachment(self.engine.export_snapshot())

        @snapshot_router.get("/duplicate")
        def duplicate_snapshot():
            return self._attachment(self.engine.duplicate_snapshot())

        @snapshot_router.post("/import")
        async def import_snapshot(request: Request):
            data = await request.body()
            try:
                result = self.engine.import_snapshot(data)
            except InvalidFormatError as e:
                raise HTTPException(status_code=400, detail=f"invalid snapshot: {e}")
            return {"status": "imported", **self._result(result)}

        @snapshot_router.post("/reset")
        def reset_snapshot():
            return {"status": "reset", **self._result(self.engine.reset())}

        self.app.include_router(quests_router)
        self.app.include_router(snapshot_router)


def create_app() -> FastAPI:
    return ProgressionAPI().app


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=YamlConfig().settings().log_level)
    uvicorn.run("rest_api:create_app", factory=True)
