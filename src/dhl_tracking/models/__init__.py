from .shipment import (
    Address,
    Organization,
    Person,
    Place,
    Product,
    ProofOfDelivery,
    Response,
    Shipment,
    ShipmentDetails,
    ShipmentEvent,
)
from .env_cfg import EnvCfg

__all__ = [
    "Address",
    "Organization",
    "Person",
    "Place",
    "Product",
    "ProofOfDelivery",
    "Response",
    "Shipment",
    "ShipmentDetails",
    "ShipmentEvent",
    "EnvCfg",
]
