# src/dhl_tracking/export/workbook.py
from __future__ import annotations

import warnings
from pathlib import Path
from typing import Any, Iterable, Optional

import pandas as pd
from openpyxl import load_workbook

from dhl_tracking.models.shipment import Place, Response, ShipmentEvent

SHIPMENTS_SHEET = "Shipments"
EVENTS_SHEET = "Events"
TN_COLUMN = "Tracking Number"

SHIPMENT_COLUMNS = [
    TN_COLUMN,
    "Service",
    "StatusCode",
    "StatusTimestampUtc",
    "StatusDescription",
    "EstimatedDeliveryUtc",
    "EstimatedDeliveryRemark",
    "Origin",
    "Destination",
    "Product",
    "Receiver",
    "TotalPieces",
    "ProofOfDeliveryUrl",
    "EventsCount",
]

EVENT_COLUMNS = [
    TN_COLUMN,
    "Seq",
    "TimestampUtc",
    "StatusCode",
    "Location",
    "Description",
    "Remark",
    "NextSteps",
]


def _place_label(place: Optional[Place]) -> str:
    if place is None:
        return ""
    a = place.address
    parts = [a.address_locality, a.postal_code, a.country_code]
    return ", ".join(p for p in parts if p)


def _code(event: ShipmentEvent) -> str:
    return event.status_code.value if event.status_code else ""


def _naive_utc(ts) -> Any:
    # Excel cannot store tz-aware datetimes; every model timestamp is UTC.
    return pd.Timestamp(ts).tz_convert("UTC").tz_localize(None)


def shipments_frame(responses: Iterable[Response]) -> pd.DataFrame:
    """One row per shipment across all responses, in response order."""
    rows = []
    for resp in responses:
        for s in resp.shipments:
            d = s.details
            rows.append({
                TN_COLUMN: s.id,
                "Service": s.service.value,
                "StatusCode": _code(s.status),
                "StatusTimestampUtc": _naive_utc(s.status.timestamp),
                "StatusDescription": s.status.description or "",
                "EstimatedDeliveryUtc": _naive_utc(s.estimated_time_of_delivery),
                "EstimatedDeliveryRemark": s.estimated_time_of_delivery_remark or "",
                "Origin": _place_label(s.origin),
                "Destination": _place_label(s.destination),
                "Product": d.product.product_name if d.product else "",
                "Receiver": d.receiver.name if d.receiver else "",
                "TotalPieces": d.total_number_of_pieces,
                "ProofOfDeliveryUrl": d.proof_of_delivery.document_url,
                "EventsCount": len(s.events),
            })
    df = pd.DataFrame(rows, columns=SHIPMENT_COLUMNS)
    df[TN_COLUMN] = df[TN_COLUMN].astype("object")
    return df


def events_frame(responses: Iterable[Response]) -> pd.DataFrame:
    """One row per history event; `Seq` keeps DHL's event order per shipment."""
    rows = []
    for resp in responses:
        for s in resp.shipments:
            for i, ev in enumerate(s.events):
                rows.append({
                    TN_COLUMN: s.id,
                    "Seq": i,
                    "TimestampUtc": _naive_utc(ev.timestamp),
                    "StatusCode": _code(ev),
                    "Location": _place_label(ev.location),
                    "Description": ev.description or "",
                    "Remark": ev.remark or "",
                    "NextSteps": ev.next_steps or "",
                })
    df = pd.DataFrame(rows, columns=EVENT_COLUMNS)
    df[TN_COLUMN] = df[TN_COLUMN].astype("object")
    return df


def write_workbook(responses: Iterable[Response], path: Path) -> Path:
    """Write Shipments and Events sheets; tracking numbers are stored as Excel text."""
    path = Path(path)
    responses = list(responses)
    path.parent.mkdir(parents=True, exist_ok=True)

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        with pd.ExcelWriter(path, engine="openpyxl", mode="w") as xw:
            shipments_frame(responses).to_excel(
                xw, sheet_name=SHIPMENTS_SHEET, index=False, na_rep="")
            events_frame(responses).to_excel(
                xw, sheet_name=EVENTS_SHEET, index=False, na_rep="")

    # Long numeric ids would otherwise be shown in scientific notation.
    wb = load_workbook(path)
    for sheet_name in (SHIPMENTS_SHEET, EVENTS_SHEET):
        ws = wb[sheet_name]
        tn_col_idx = None
        for col_idx, cell in enumerate(ws[1], start=1):
            if (cell.value or "") == TN_COLUMN:
                tn_col_idx = col_idx
                break
        if tn_col_idx is None:
            continue
        for r in range(2, ws.max_row + 1):
            c = ws.cell(row=r, column=tn_col_idx)
            c.value = "" if c.value is None else str(c.value)
            c.number_format = "@"
    wb.save(path)
    return path


__all__ = [
    "SHIPMENTS_SHEET",
    "EVENTS_SHEET",
    "SHIPMENT_COLUMNS",
    "EVENT_COLUMNS",
    "shipments_frame",
    "events_frame",
    "write_workbook",
]
