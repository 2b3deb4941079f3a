import csv
import io
import logging
from pathlib import Path
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException
from fastapi.responses import RedirectResponse, Response, StreamingResponse
from pydantic import BaseModel, Field

from uic406.core.builder import build_network
from uic406.core.compressor import compress_timetable
from uic406.core.headway import DEFAULT_MIN_HEADWAY, segment_headway
from uic406.sim.audit import write_audit
from uic406.sim.scenario import critical_path_json, network_json, run_scenario
from uic406.store.loader import read_repository, repository_from_dict
from uic406.store.writer import timetable_rows

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parents[1] / "Data"

app = FastAPI(title="UIC 406 Timetable Compression API")


@app.get("/")
async def root() -> RedirectResponse:
    # Redirect base URL to interactive docs to avoid 404 confusion
    return RedirectResponse(url="/docs")


@app.get("/favicon.ico")
async def favicon() -> Response:
    # Return empty 204 for favicon to avoid noisy 404s in logs
    return Response(status_code=204)


class StationIn(BaseModel):
    id: str
    name: str | None = None


class SegmentIn(BaseModel):
    id: str
    from_station: str
    to_station: str
    min_headway: int | None = Field(default=None, ge=0)


class TimetableSlot(BaseModel):
    arrival: int
    departure: int


class TrainIn(BaseModel):
    id: str
    route: List[str]
    timetable: Dict[str, TimetableSlot]
    min_stopping: Dict[str, int] | None = None


class ScenarioIn(BaseModel):
    stations: List[StationIn] = Field(default_factory=list)
    segments: List[SegmentIn]
    trains: List[TrainIn]
    min_headway: int = Field(default=DEFAULT_MIN_HEADWAY, ge=0)


class TimetableRowOut(BaseModel):
    TrainID: str
    StationID: str
    Arrival: int | None = None
    Departure: int | None = None


def _compress(body: ScenarioIn, method: str, strategy: str, time_window: int | None) -> Dict[str, Any]:
    try:
        out = run_scenario(body.model_dump(), method=method, strategy=strategy, time_window=time_window)
    except ValueError as exc:
        # data-integrity, load and argument errors
        logger.warning("compression rejected: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    result = out["result"]
    write_audit({
        "type": "compress",
        "method": result.method.value,
        "strategy": strategy,
        "trains": len(body.trains),
        "summary": result.summary,
    })
    return {
        "method": result.method.value,
        "summary": result.summary,
        "critical_path": critical_path_json(result),
        "timetable": [TimetableRowOut(**row).model_dump() for row in out["timetable"]],
    }


@app.post("/compress")
async def compress(
    body: ScenarioIn, method: str = "ean", strategy: str = "topological", time_window: int | None = None
) -> Dict[str, Any]:
    """Compress a timetable (UIC 406) and return the compressed times.

    Body:
      {
        "segments": [ {id, from_station, to_station, min_headway?}, ... ],
        "trains": [ {id, route: [segment ids], timetable: {station: {arrival, departure}}, min_stopping?}, ... ],
        "min_headway": 6
      }
    """
    return _compress(body, method, strategy, time_window)


@app.post("/compress/csv")
async def compress_csv(
    body: ScenarioIn, method: str = "ean", strategy: str = "topological"
) -> StreamingResponse:
    out = _compress(body, method, strategy, None)
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=["TrainID", "StationID", "Arrival", "Departure"])
    writer.writeheader()
    writer.writerows(out["timetable"])
    buf.seek(0)
    return StreamingResponse(
        buf, media_type="text/csv", headers={"Content-Disposition": "attachment; filename=compressed_timetable.csv"}
    )


@app.post("/network")
async def network(body: ScenarioIn) -> Dict[str, Any]:
    """Event-activity network of the scenario, before solving (all compressed times are 0)."""
    try:
        repository = repository_from_dict(body.model_dump())
        ean = build_network(repository.trains, repository.segments, segment_headway(body.min_headway))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return network_json(ean)


@app.get("/demo")
async def demo(method: str = "ean", strategy: str = "topological") -> Dict[str, Any]:
    repository = read_repository(DATA_DIR)
    try:
        result = compress_timetable(repository, method=method, strategy=strategy)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return {
        "summary": result.summary,
        "critical_path": critical_path_json(result),
        "timetable": timetable_rows(repository.trains),
    }
