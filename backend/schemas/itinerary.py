"""
schemas/itinerary.py
--------------------
Dataclass definitions for the itinerary structures flowing through the
enrichment pipeline.

Wire format (what the upstream generator produces and the UI consumes) uses
camelCase keys: mealType, restaurantOptions, transportToNext, photoUrl,
placeId, userRatingsTotal, ...  Attribute names here are snake_case;
from_dict()/to_dict() translate between the two.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional


TRANSPORT_MODES: tuple[str, ...] = (
    "walking", "transit", "taxi", "driving", "flight", "ferry", "bicycle",
)
MEAL_TYPES: tuple[str, ...] = ("breakfast", "lunch", "dinner")


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["Coordinates"]:
        if not data:
            return None
        try:
            return cls(lat=float(data["lat"]), lng=float(data["lng"]))
        except (KeyError, TypeError, ValueError):
            return None

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class Restaurant:
    """
    A real dining candidate returned by RestaurantFinder.

    Immutable once constructed; identity is place_id.
      price_level  : Google 1–4 ($ … $$$$), defaults to 2 when Google omits it
      distance     : human text relative to the search origin ("450 m away")
      walking_time : human text at 80 m/min ("6 min walk")
      badges       : halal | vegetarian | michelin | highly-rated
    """
    place_id: str
    name: str
    vicinity: str = ""
    rating: float = 0.0
    user_ratings_total: int = 0
    price_level: int = 2
    cuisine: tuple[str, ...] = ()
    open_now: bool = True
    distance: str = ""
    walking_time: str = ""
    badges: tuple[str, ...] = ()
    coordinates: Optional[Coordinates] = None
    photo_url: Optional[str] = None
    google_maps_url: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Restaurant":
        return cls(
            place_id=data["placeId"],
            name=data.get("name", ""),
            vicinity=data.get("vicinity", ""),
            rating=float(data.get("rating") or 0.0),
            user_ratings_total=int(data.get("userRatingsTotal") or 0),
            price_level=int(data.get("priceLevel") or 2),
            cuisine=tuple(data.get("cuisine") or ()),
            open_now=bool(data.get("openNow", True)),
            distance=data.get("distance", ""),
            walking_time=data.get("walkingTime", ""),
            badges=tuple(data.get("badges") or ()),
            coordinates=Coordinates.from_dict(data.get("coordinates")),
            photo_url=data.get("photoUrl"),
            google_maps_url=data.get("googleMapsUrl", ""),
        )

    def to_dict(self) -> dict:
        out = {
            "placeId":          self.place_id,
            "name":             self.name,
            "vicinity":         self.vicinity,
            "rating":           self.rating,
            "userRatingsTotal": self.user_ratings_total,
            "priceLevel":       self.price_level,
            "cuisine":          list(self.cuisine),
            "openNow":          self.open_now,
            "distance":         self.distance,
            "walkingTime":      self.walking_time,
            "badges":           list(self.badges),
            "googleMapsUrl":    self.google_maps_url,
            "coordinates":      self.coordinates.to_dict() if self.coordinates else None,
        }
        if self.photo_url:
            out["photoUrl"] = self.photo_url
        return out


@dataclass
class TransportationDetails:
    """Leg from one activity to the next activity of the same day."""
    mode: str = "walking"          # one of TRANSPORT_MODES
    duration: str = ""             # "12 min" | "~12 min" | Google text ("1 hour 5 mins")
    distance: str = ""             # "1.4 km"
    cost: str = ""                 # "Free" | "¥200-400" | "~€19"
    mode_name: str = ""            # "Walk" | "Public Transit" | "Subway G" ...
    icon: str = ""

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["TransportationDetails"]:
        if not data:
            return None
        return cls(
            mode=data.get("mode", "walking"),
            duration=data.get("duration", ""),
            distance=data.get("distance", ""),
            cost=data.get("cost", ""),
            mode_name=data.get("modeName", ""),
            icon=data.get("icon", ""),
        )

    def to_dict(self) -> dict:
        return {
            "mode":     self.mode,
            "duration": self.duration,
            "distance": self.distance,
            "cost":     self.cost,
            "modeName": self.mode_name,
            "icon":     self.icon,
        }


# Keys consumed by Activity.from_dict; everything else is carried through in
# Activity.extra so the UI never loses generator fields it renders.
_ACTIVITY_KEYS = frozenset({
    "id", "time", "title", "location", "coordinates", "lat", "lng", "type",
    "mealType", "restaurantOptions", "transportToNext", "photoUrl", "placeId",
    "description", "icon",
})


@dataclass
class Activity:
    """
    One scheduled item within a Day.

    Created by the upstream generator; mutated in place by each pipeline stage.
    """
    time: str = "00:00"                                   # HH:MM, 24h
    title: str = ""
    location: str = ""
    coordinates: Optional[Coordinates] = None
    type: Optional[str] = None                            # activity | meal | mosque | airport | ...
    meal_type: Optional[str] = None                       # breakfast | lunch | dinner
    restaurant_options: list[Restaurant] = field(default_factory=list)
    transport_to_next: Optional[TransportationDetails] = None
    photo_url: Optional[str] = None
    place_id: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    id: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "Activity":
        coords = Coordinates.from_dict(data.get("coordinates"))
        if coords is None and data.get("lat") is not None and data.get("lng") is not None:
            coords = Coordinates.from_dict({"lat": data["lat"], "lng": data["lng"]})
        return cls(
            time=str(data.get("time") or "00:00"),
            title=str(data.get("title") or ""),
            location=str(data.get("location") or ""),
            coordinates=coords,
            type=data.get("type"),
            meal_type=data.get("mealType"),
            restaurant_options=[
                Restaurant.from_dict(r) for r in (data.get("restaurantOptions") or [])
            ],
            transport_to_next=TransportationDetails.from_dict(data.get("transportToNext")),
            photo_url=data.get("photoUrl"),
            place_id=data.get("placeId"),
            description=data.get("description"),
            icon=data.get("icon"),
            id=data.get("id"),
            extra={k: v for k, v in data.items() if k not in _ACTIVITY_KEYS},
        )

    def to_dict(self) -> dict:
        out: dict[str, Any] = dict(self.extra)
        out.update({"time": self.time, "title": self.title, "location": self.location})
        optional = {
            "id":                self.id,
            "type":              self.type,
            "mealType":          self.meal_type,
            "coordinates":       self.coordinates.to_dict() if self.coordinates else None,
            "transportToNext":   self.transport_to_next.to_dict() if self.transport_to_next else None,
            "photoUrl":          self.photo_url,
            "placeId":           self.place_id,
            "description":       self.description,
            "icon":              self.icon,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        if self.restaurant_options:
            out["restaurantOptions"] = [r.to_dict() for r in self.restaurant_options]
        return out


@dataclass
class Day:
    """One calendar day of the trip."""
    day: int = 1
    activities: list[Activity] = field(default_factory=list)
    summary: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Day":
        return cls(
            day=int(data.get("day") or 1),
            activities=[Activity.from_dict(a) for a in (data.get("activities") or [])],
            summary=data.get("summary"),
        )

    def to_dict(self) -> dict:
        out: dict[str, Any] = {
            "day": self.day,
            "activities": [a.to_dict() for a in self.activities],
        }
        if self.summary is not None:
            out["summary"] = self.summary
        return out


@dataclass
class RestaurantExclusions:
    """
    Restaurant place ids already used per meal type on the days processed so
    far. Threaded forward day by day; filtering input only, never persisted.
    """
    breakfast: list[str] = field(default_factory=list)
    lunch: list[str] = field(default_factory=list)
    dinner: list[str] = field(default_factory=list)

    def for_meal(self, meal_type: str) -> list[str]:
        return list(getattr(self, meal_type))

    def merged(self, used: "RestaurantExclusions") -> "RestaurantExclusions":
        """Return a new accumulator with *used* appended per meal type."""
        return RestaurantExclusions(
            breakfast=self.breakfast + used.breakfast,
            lunch=self.lunch + used.lunch,
            dinner=self.dinner + used.dinner,
        )
