from typing import Any, List, Optional, Union

from pydantic import BaseModel

from database import Repository, serialize_doc, to_object_id


def point(longitude: float, latitude: float) -> dict:
    return {"type": "Point", "coordinates": [longitude, latitude]}


def nearest_pipeline(longitude: float, latitude: float, limit: int = 1) -> List[dict]:
    """Trackers ordered by spherical distance, joined to their deliveryman."""
    return [
        {
            "$geoNear": {
                "near": point(longitude, latitude),
                "distanceField": "distance",
                "key": "location",
                "spherical": True,
            }
        },
        {
            "$lookup": {
                "from": "employees",
                "localField": "employee",
                "foreignField": "_id",
                "as": "employee",
            }
        },
        {"$unwind": "$employee"},
        {"$match": {"employee.role": "deliveryman"}},
        {"$limit": limit},
    ]


class TrackerRepository(Repository):
    """Last known position of each deliveryman.

    Coordinates are kept twice: as plain ``longitude``/``latitude`` fields for
    clients and as a GeoJSON ``location`` point for the 2dsphere index.
    """

    collection_name = "trackers"
    references = ("employee",)

    def create(self, data: Union[BaseModel, dict]) -> dict:
        payload = data.model_dump() if isinstance(data, BaseModel) else dict(data)
        payload.setdefault("longitude", 0)
        payload.setdefault("latitude", 0)
        payload["location"] = point(payload["longitude"], payload["latitude"])
        return super().create(payload)

    def find_by_employee(self, employee_id: Any) -> Optional[dict]:
        oid = to_object_id(employee_id)
        if oid is None:
            return None
        return self.find_one({"employee": oid})

    def update_location(self, _id: Any, longitude: float, latitude: float) -> Optional[dict]:
        return self.update_by_id(
            _id,
            {"longitude": longitude, "latitude": latitude, "location": point(longitude, latitude)},
        )

    def find_nearest(self, longitude: float, latitude: float) -> Optional[dict]:
        """Closest tracker to the point, with its employee embedded, or None."""
        trackers = list(self.collection.aggregate(nearest_pipeline(longitude, latitude)))
        return serialize_doc(trackers[0]) if trackers else None
