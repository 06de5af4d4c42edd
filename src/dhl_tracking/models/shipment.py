# src/dhl_tracking/models/shipment.py
"""
Typed, immutable view of a DHL `/track/shipments` response body.

`from_dict` takes the output of `json.loads` and applies the codecs per field;
`to_dict` renders the lower-camel-case wire shape again. Any missing required
field, wrong JSON type, unknown code or bad date raises `DeserializationError`
carrying the dotted path of the field.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar

from dhl_tracking.api.codecs import (
    Service,
    StatusCode,
    encode_enum,
    format_date,
    format_datetime,
    parse_date,
    parse_datetime,
    parse_service,
    parse_status_code,
)
from dhl_tracking.api.errors import CodecError, DeserializationError

T = TypeVar("T")

_MISSING = object()

# DHL piece counts are unsigned 32-bit.
MAX_PIECES = 2**32 - 1


# --- field helpers -----------------------------------------------------------

def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _expect_object(value: Any, path: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise DeserializationError("Expected a JSON object", path=path, value=value)
    return value


def _required(payload: Dict[str, Any], key: str, path: str) -> Any:
    value = payload.get(key, _MISSING)
    if value is _MISSING or value is None:
        raise DeserializationError("Missing required field", path=_join(path, key), value=None)
    return value


def _required_str(payload: Dict[str, Any], key: str, path: str) -> str:
    value = _required(payload, key, path)
    if not isinstance(value, str):
        raise DeserializationError("Expected a string", path=_join(path, key), value=value)
    return value


def _optional_str(payload: Dict[str, Any], key: str, path: str) -> Optional[str]:
    value = payload.get(key)
    if value is not None and not isinstance(value, str):
        raise DeserializationError("Expected a string", path=_join(path, key), value=value)
    return value


def _decode(codec: Callable[[Any], T], value: Any, path: str) -> T:
    try:
        return codec(value)
    except CodecError as ex:
        raise DeserializationError(str(ex), path=path, value=value) from ex


def _optional_model(payload: Dict[str, Any], key: str, path: str, build: Callable[..., T]) -> Optional[T]:
    value = payload.get(key)
    if value is None:
        return None
    return build(value, path=_join(path, key))


def _list_of(payload: Dict[str, Any], key: str, path: str, build: Callable[[Any, str], T]) -> Tuple[T, ...]:
    value = _required(payload, key, path)
    if not isinstance(value, list):
        raise DeserializationError("Expected a JSON array", path=_join(path, key), value=value)
    return tuple(build(item, f"{_join(path, key)}[{i}]") for i, item in enumerate(value))


def _str_item(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise DeserializationError("Expected a string", path=path, value=value)
    return value


def _drop_none(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


# --- model -------------------------------------------------------------------

@dataclass(frozen=True)
class Address:
    country_code: Optional[str] = None
    postal_code: Optional[str] = None
    address_locality: Optional[str] = None
    street_address: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Any, *, path: str = "address") -> "Address":
        obj = _expect_object(payload, path)
        return cls(
            country_code=_optional_str(obj, "countryCode", path),
            postal_code=_optional_str(obj, "postalCode", path),
            address_locality=_optional_str(obj, "addressLocality", path),
            street_address=_optional_str(obj, "streetAddress", path),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "countryCode": self.country_code,
            "postalCode": self.postal_code,
            "addressLocality": self.address_locality,
            "streetAddress": self.street_address,
        })


@dataclass(frozen=True)
class Place:
    address: Address

    @classmethod
    def from_dict(cls, payload: Any, *, path: str = "place") -> "Place":
        obj = _expect_object(payload, path)
        return cls(address=Address.from_dict(_required(obj, "address", path), path=_join(path, "address")))

    def to_dict(self) -> Dict[str, Any]:
        return {"address": self.address.to_dict()}


@dataclass(frozen=True)
class ShipmentEvent:
    timestamp: datetime
    location: Optional[Place] = None
    # None only when DHL omits statusCode; null or an unknown code is an error.
    status_code: Optional[StatusCode] = None
    description: Optional[str] = None
    remark: Optional[str] = None
    next_steps: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Any, *, path: str = "event") -> "ShipmentEvent":
        obj = _expect_object(payload, path)
        raw_code = obj.get("statusCode", _MISSING)
        return cls(
            timestamp=_decode(parse_datetime, _required(obj, "timestamp", path), _join(path, "timestamp")),
            location=_optional_model(obj, "location", path, Place.from_dict),
            status_code=(
                None if raw_code is _MISSING
                else _decode(parse_status_code, raw_code, _join(path, "statusCode"))
            ),
            description=_optional_str(obj, "description", path),
            remark=_optional_str(obj, "remark", path),
            next_steps=_optional_str(obj, "nextSteps", path),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "timestamp": format_datetime(self.timestamp),
            "location": self.location.to_dict() if self.location else None,
            "statusCode": encode_enum(self.status_code) if self.status_code else None,
            "description": self.description,
            "remark": self.remark,
            "nextSteps": self.next_steps,
        })


@dataclass(frozen=True)
class Person:
    family_name: str
    given_name: str
    name: str

    @classmethod
    def from_dict(cls, payload: Any, *, path: str = "person") -> "Person":
        obj = _expect_object(payload, path)
        return cls(
            family_name=_required_str(obj, "familyName", path),
            given_name=_required_str(obj, "givenName", path),
            name=_required_str(obj, "name", path),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"familyName": self.family_name, "givenName": self.given_name, "name": self.name}


@dataclass(frozen=True)
class Organization:
    description: str
    organization_name: str

    @classmethod
    def from_dict(cls, payload: Any, *, path: str = "organization") -> "Organization":
        obj = _expect_object(payload, path)
        return cls(
            description=_required_str(obj, "description", path),
            organization_name=_required_str(obj, "organizationName", path),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"description": self.description, "organizationName": self.organization_name}


@dataclass(frozen=True)
class Product:
    description: str
    product_name: str

    @classmethod
    def from_dict(cls, payload: Any, *, path: str = "product") -> "Product":
        obj = _expect_object(payload, path)
        return cls(
            description=_required_str(obj, "description", path),
            product_name=_required_str(obj, "productName", path),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"description": self.description, "productName": self.product_name}


@dataclass(frozen=True)
class ProofOfDelivery:
    document_url: str

    @classmethod
    def from_dict(cls, payload: Any, *, path: str = "proofOfDelivery") -> "ProofOfDelivery":
        obj = _expect_object(payload, path)
        return cls(document_url=_required_str(obj, "documentUrl", path))

    def to_dict(self) -> Dict[str, Any]:
        return {"documentUrl": self.document_url}


@dataclass(frozen=True)
class ShipmentDetails:
    proof_of_delivery: ProofOfDelivery
    total_number_of_pieces: int
    piece_ids: Tuple[str, ...] = ()
    carrier: Optional[Organization] = None
    product: Optional[Product] = None
    receiver: Optional[Person] = None
    sender: Optional[Person] = None

    @classmethod
    def from_dict(cls, payload: Any, *, path: str = "details") -> "ShipmentDetails":
        obj = _expect_object(payload, path)

        pieces = _required(obj, "totalNumberOfPieces", path)
        # bool is an int subclass; JSON true/false is not a piece count
        if isinstance(pieces, bool) or not isinstance(pieces, int) or not 0 <= pieces <= MAX_PIECES:
            raise DeserializationError(
                "Expected an unsigned 32-bit integer", path=_join(path, "totalNumberOfPieces"), value=pieces)

        return cls(
            carrier=_optional_model(obj, "carrier", path, Organization.from_dict),
            product=_optional_model(obj, "product", path, Product.from_dict),
            receiver=_optional_model(obj, "receiver", path, Person.from_dict),
            sender=_optional_model(obj, "sender", path, Person.from_dict),
            proof_of_delivery=ProofOfDelivery.from_dict(
                _required(obj, "proofOfDelivery", path), path=_join(path, "proofOfDelivery")),
            total_number_of_pieces=pieces,
            piece_ids=_list_of(obj, "pieceIds", path, _str_item),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "carrier": self.carrier.to_dict() if self.carrier else None,
            "product": self.product.to_dict() if self.product else None,
            "receiver": self.receiver.to_dict() if self.receiver else None,
            "sender": self.sender.to_dict() if self.sender else None,
            "proofOfDelivery": self.proof_of_delivery.to_dict(),
            "totalNumberOfPieces": self.total_number_of_pieces,
            "pieceIds": list(self.piece_ids),
        })


@dataclass(frozen=True)
class Shipment:
    id: str
    service: Service
    status: ShipmentEvent
    estimated_time_of_delivery: datetime
    details: ShipmentDetails
    events: Tuple[ShipmentEvent, ...] = ()
    origin: Optional[Place] = None
    destination: Optional[Place] = None
    estimated_time_of_delivery_remark: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Any, *, path: str = "shipment") -> "Shipment":
        obj = _expect_object(payload, path)
        return cls(
            id=_required_str(obj, "id", path),
            service=_decode(parse_service, _required(obj, "service", path), _join(path, "service")),
            origin=_optional_model(obj, "origin", path, Place.from_dict),
            destination=_optional_model(obj, "destination", path, Place.from_dict),
            status=ShipmentEvent.from_dict(_required(obj, "status", path), path=_join(path, "status")),
            estimated_time_of_delivery=_decode(
                parse_date,
                _required(obj, "estimatedTimeOfDelivery", path),
                _join(path, "estimatedTimeOfDelivery"),
            ),
            estimated_time_of_delivery_remark=_optional_str(obj, "estimatedTimeOfDeliveryRemark", path),
            details=ShipmentDetails.from_dict(_required(obj, "details", path), path=_join(path, "details")),
            events=_list_of(obj, "events", path, lambda v, p: ShipmentEvent.from_dict(v, path=p)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "service": encode_enum(self.service),
            "origin": self.origin.to_dict() if self.origin else None,
            "destination": self.destination.to_dict() if self.destination else None,
            "status": self.status.to_dict(),
            "estimatedTimeOfDelivery": format_date(self.estimated_time_of_delivery),
            "estimatedTimeOfDeliveryRemark": self.estimated_time_of_delivery_remark,
            "details": self.details.to_dict(),
            "events": [e.to_dict() for e in self.events],
        })


@dataclass(frozen=True)
class Response:
    shipments: Tuple[Shipment, ...] = ()
    possible_additional_shipments_url: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, payload: Any, *, path: str = "") -> "Response":
        obj = _expect_object(payload, path or "$")
        return cls(
            shipments=_list_of(obj, "shipments", path, lambda v, p: Shipment.from_dict(v, path=p)),
            possible_additional_shipments_url=_list_of(obj, "possibleAdditionalShipmentsUrl", path, _str_item),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shipments": [s.to_dict() for s in self.shipments],
            "possibleAdditionalShipmentsUrl": list(self.possible_additional_shipments_url),
        }


__all__ = [
    "Address",
    "Place",
    "ShipmentEvent",
    "Person",
    "Organization",
    "Product",
    "ProofOfDelivery",
    "ShipmentDetails",
    "Shipment",
    "Response",
]
