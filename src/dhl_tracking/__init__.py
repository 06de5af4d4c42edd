# src/dhl_tracking/__init__.py
from .api.client import ReplayTransport, TrackingClient
from .api.codecs import Service, StatusCode
from .api.errors import (
    ClientError,
    DeserializationError,
    InvalidTrackingNumber,
    ParcelNotFound,
    ServerError,
    TransportError,
    Unauthorized,
)
from .api.tracking_number import TrackingNumber, validate
from .models import Response, Shipment, ShipmentEvent

__all__ = [
    "TrackingClient",
    "ReplayTransport",
    "TrackingNumber",
    "validate",
    "Service",
    "StatusCode",
    "Response",
    "Shipment",
    "ShipmentEvent",
    "ClientError",
    "InvalidTrackingNumber",
    "Unauthorized",
    "ParcelNotFound",
    "ServerError",
    "TransportError",
    "DeserializationError",
]
