import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field

from context import DomainContext
from database import rollback_on_error
from dependencies import ADMIN, DELIVERYMAN, MANAGER, get_context, require_roles
from schemas import Tracker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trackers", tags=["Trackers"])


class Position(BaseModel):
    longitude: float = Field(..., ge=-180, le=180)
    latitude: float = Field(..., ge=-90, le=90)


class TrackerCreate(Position):
    employee_id: str


@router.get("/", dependencies=[Depends(require_roles(ADMIN))])
def get_tracker_by_employee(employee_id: str = Query(..., min_length=1),
                            context: DomainContext = Depends(get_context)):
    tracker = context.trackers.find_by_employee(employee_id)
    if not tracker:
        raise HTTPException(status_code=404, detail="Tracker not found")
    return tracker


@router.get("/nearest", dependencies=[Depends(require_roles(ADMIN, MANAGER))])
def get_nearest_tracker(longitude: float = Query(..., ge=-180, le=180),
                        latitude: float = Query(..., ge=-90, le=90),
                        context: DomainContext = Depends(get_context)):
    tracker = context.trackers.find_nearest(longitude, latitude)
    if not tracker:
        raise HTTPException(status_code=404, detail="No courier available")
    return tracker


@router.post("/", dependencies=[Depends(require_roles(ADMIN))])
def create_tracker(payload: TrackerCreate, context: DomainContext = Depends(get_context)):
    employee = context.employees.find_by_id(payload.employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    if employee.get("role") != DELIVERYMAN.value:
        raise HTTPException(status_code=400, detail="Only deliverymen carry a tracker")
    if context.trackers.find_by_employee(employee["_id"]):
        raise HTTPException(status_code=409, detail="Employee already has a tracker")

    with rollback_on_error() as undo:
        tracker = context.trackers.create(Tracker(
            employee=employee["_id"],
            longitude=payload.longitude,
            latitude=payload.latitude,
        ))
        undo.append(lambda: context.trackers.delete_by_id(tracker["_id"]))
        context.employees.update_tracker(employee["_id"], tracker["_id"])
    return tracker


@router.patch("/{tracker_id}")
def update_tracker(tracker_id: str, payload: Position,
                   employee: dict = Depends(require_roles(DELIVERYMAN)),
                   context: DomainContext = Depends(get_context)):
    tracker = context.trackers.find_by_id(tracker_id)
    if not tracker:
        raise HTTPException(status_code=404, detail="Tracker not found")
    if tracker["employee"] != employee["_id"]:
        logger.warning("Employee %s tried to move tracker %s", employee["_id"], tracker_id)
        raise HTTPException(status_code=403, detail="Forbidden")
    return context.trackers.update_location(tracker["_id"], payload.longitude, payload.latitude)


@router.delete("/{tracker_id}", status_code=204, dependencies=[Depends(require_roles(ADMIN))])
def delete_tracker(tracker_id: str, context: DomainContext = Depends(get_context)):
    tracker = context.trackers.delete_by_id(tracker_id)
    if not tracker:
        raise HTTPException(status_code=404, detail="Tracker not found")
    context.employees.unset(tracker["employee"], "tracker")
    return Response(status_code=204)
