import copy
import json
from typing import Any, Dict, List, Optional

import pytest

from dhl_tracking.api.transport import TransportResponse


SHIPMENT_BODY: Dict[str, Any] = {
    "shipments": [
        {
            "id": "00340434161094681800",
            "service": "express",
            "origin": {
                "address": {
                    "countryCode": "DE",
                    "postalCode": "53113",
                    "addressLocality": "Bonn",
                    "streetAddress": "Charles-de-Gaulle-Str. 20",
                }
            },
            "destination": {"address": {"countryCode": "NL", "addressLocality": "Amsterdam"}},
            "status": {
                "timestamp": "2021-06-15T10:30:00",
                "location": {"address": {"addressLocality": "Amsterdam"}},
                "statusCode": "transit",
                "description": "Arrived at delivery facility",
            },
            "estimatedTimeOfDelivery": "2021-06-17",
            "estimatedTimeOfDeliveryRemark": "By end of day",
            "details": {
                "carrier": {"description": "DHL", "organizationName": "DHL Express"},
                "product": {"description": "Express worldwide", "productName": "DHL EXPRESS WORLDWIDE"},
                "receiver": {"familyName": "Jansen", "givenName": "Eva", "name": "Eva Jansen"},
                "proofOfDelivery": {"documentUrl": "https://example.com/pod/1"},
                "totalNumberOfPieces": 2,
                "pieceIds": ["JD014600006281230704", "JD014600006281230705"],
            },
            "events": [
                {
                    "timestamp": "2021-06-15T10:30:00",
                    "location": {"address": {"addressLocality": "Amsterdam"}},
                    "statusCode": "transit",
                    "description": "Arrived at delivery facility",
                }
            ],
        }
    ],
    "possibleAdditionalShipmentsUrl": [],
}


@pytest.fixture
def shipment_body() -> Dict[str, Any]:
    return copy.deepcopy(SHIPMENT_BODY)


class StubTransport:
    """Records GET calls and answers with a fixed status/body."""

    def __init__(self, status_code: int = 200, body: Any = None, *, exc: Optional[BaseException] = None) -> None:
        self.status_code = status_code
        if isinstance(body, (dict, list)):
            body = json.dumps(body).encode("utf-8")
        elif isinstance(body, str):
            body = body.encode("utf-8")
        self.body = body or b""
        self.exc = exc
        self.calls: List[Dict[str, Any]] = []

    async def get(self, url, *, headers=None):
        self.calls.append({"url": url, "headers": dict(headers or {})})
        if self.exc is not None:
            raise self.exc
        return TransportResponse(self.status_code, self.body)


class NeverCalledTransport:
    async def get(self, url, *, headers=None):
        raise AssertionError(f"transport must not be called (url={url})")


@pytest.fixture
def stub_transport_cls():
    return StubTransport


@pytest.fixture
def never_called_transport():
    return NeverCalledTransport()
