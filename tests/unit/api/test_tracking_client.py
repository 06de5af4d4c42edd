import asyncio
import logging

import pytest

from dhl_tracking.api.client import TrackingClient
from dhl_tracking.api.codecs import Service, StatusCode
from dhl_tracking.api.errors import (
    ClientError,
    DeserializationError,
    InvalidTrackingNumber,
    ParcelNotFound,
    ServerError,
    TransportError,
    Unauthorized,
)


def run(coro):
    return asyncio.run(coro)


def test_fetch_happy_path_round_trips_the_body(stub_transport_cls, shipment_body):
    transport = stub_transport_cls(200, shipment_body)
    client = TrackingClient("secret-key", transport)

    resp = run(client.fetch("00340434161094681800"))

    assert len(resp.shipments) == 1
    s = resp.shipments[0]
    assert s.id == "00340434161094681800"
    assert s.service is Service.EXPRESS
    assert s.status.status_code is StatusCode.TRANSIT
    assert len(s.events) == 1
    assert resp.to_dict() == shipment_body


def test_fetch_builds_url_and_headers(stub_transport_cls, shipment_body):
    transport = stub_transport_cls(200, shipment_body)
    run(TrackingClient("secret-key", transport).fetch("00340434161094681800"))

    assert transport.calls == [{
        "url": "https://api-eu.dhl.com/track/shipments?trackingNumber=00340434161094681800",
        "headers": {"Accept": "application/json", "DHL-API-KEY": "secret-key"},
    }]


def test_fetch_uses_trimmed_number_and_quotes_it(stub_transport_cls, shipment_body):
    transport = stub_transport_cls(200, shipment_body)
    client = TrackingClient("k", transport, base_url="https://sandbox.example/")
    run(client.fetch("1234567890  "))
    run(client.fetch("AB-CDE-1234567"))

    assert transport.calls[0]["url"] == "https://sandbox.example/track/shipments?trackingNumber=1234567890"
    assert transport.calls[1]["url"].endswith("trackingNumber=AB-CDE-1234567")


def test_fetch_per_call_api_key_override(stub_transport_cls, shipment_body):
    transport = stub_transport_cls(200, shipment_body)
    client = TrackingClient("default-key", transport)
    run(client.fetch("1234567890", api_key="other-key"))
    assert transport.calls[0]["headers"]["DHL-API-KEY"] == "other-key"
    assert client.api_key == "default-key"


def test_invalid_number_never_touches_the_transport(never_called_transport):
    client = TrackingClient("k", never_called_transport)
    with pytest.raises(InvalidTrackingNumber):
        run(client.fetch("!!!"))


def test_401_is_unauthorized_without_parsing(stub_transport_cls):
    transport = stub_transport_cls(401, "definitely not json")
    with pytest.raises(Unauthorized):
        run(TrackingClient("bad", transport).fetch("1234567890"))
    assert len(transport.calls) == 1


def test_404_is_parcel_not_found(stub_transport_cls):
    transport = stub_transport_cls(404, {"status": 404, "title": "No result found"})
    with pytest.raises(ParcelNotFound):
        run(TrackingClient("k", transport).fetch("1234567890"))


@pytest.mark.parametrize("status", [201, 400, 429, 500, 503])
def test_other_statuses_are_server_errors(stub_transport_cls, status):
    transport = stub_transport_cls(status, "upstream trouble")
    with pytest.raises(ServerError) as ei:
        run(TrackingClient("k", transport).fetch("1234567890"))
    assert ei.value.status_code == status
    assert ei.value.body == "upstream trouble"


def test_error_statuses_are_logged_at_warning(stub_transport_cls, caplog):
    logger = logging.getLogger("tracking_client_test")
    logger.propagate = True
    transport = stub_transport_cls(500, "x" * 5000)
    with caplog.at_level(logging.WARNING, logger="tracking_client_test"):
        with pytest.raises(ServerError):
            run(TrackingClient("k", transport, logger=logger).fetch("1234567890"))
    assert any("status=500" in r.getMessage() for r in caplog.records)
    # body preview is truncated
    assert all(len(r.getMessage()) < 3000 for r in caplog.records)


def test_invalid_json_is_a_deserialization_error(stub_transport_cls):
    transport = stub_transport_cls(200, "<html>oops</html>")
    with pytest.raises(DeserializationError) as ei:
        run(TrackingClient("k", transport).fetch("1234567890"))
    assert ei.value.path == "$"


def test_shape_mismatch_is_a_deserialization_error(stub_transport_cls, shipment_body):
    shipment_body["shipments"][0]["status"]["statusCode"] = "bogus"
    transport = stub_transport_cls(200, shipment_body)
    with pytest.raises(DeserializationError) as ei:
        run(TrackingClient("k", transport).fetch("1234567890"))
    assert ei.value.path == "shipments[0].status.statusCode"


def test_transport_failure_is_wrapped(stub_transport_cls):
    boom = ConnectionError("connection refused")
    transport = stub_transport_cls(exc=boom)
    with pytest.raises(TransportError) as ei:
        run(TrackingClient("k", transport).fetch("1234567890"))
    assert ei.value.__cause__ is boom


def test_transport_error_passes_through_unchanged(stub_transport_cls):
    original = TransportError("tls handshake failed")
    transport = stub_transport_cls(exc=original)
    with pytest.raises(TransportError) as ei:
        run(TrackingClient("k", transport).fetch("1234567890"))
    assert ei.value is original


def test_all_errors_share_a_base_class():
    for cls in (InvalidTrackingNumber, Unauthorized, ParcelNotFound, ServerError,
                TransportError, DeserializationError):
        assert issubclass(cls, ClientError)


def test_concurrent_fetches_are_independent(stub_transport_cls, shipment_body):
    transport = stub_transport_cls(200, shipment_body)
    client = TrackingClient("k", transport)

    async def both():
        return await asyncio.gather(client.fetch("1234567890"), client.fetch("JJD0123456"))

    a, b = run(both())
    assert a == b
    assert {c["url"].rsplit("=", 1)[1] for c in transport.calls} == {"1234567890", "JJD0123456"}


def test_deeply_nested_body_is_a_deserialization_error(stub_transport_cls):
    transport = stub_transport_cls(200, "[" * 100_000 + "]" * 100_000)
    with pytest.raises(DeserializationError) as ei:
        run(TrackingClient("k", transport).fetch("1234567890"))
    assert ei.value.path == "$"


def test_close_releases_the_transport(stub_transport_cls):
    closed = []
    transport = stub_transport_cls(200, {})
    transport.close = lambda: closed.append(True)

    TrackingClient("k", transport).close()

    assert closed == [True]


def test_close_without_transport_close_is_a_no_op(never_called_transport):
    TrackingClient("k", never_called_transport).close()
