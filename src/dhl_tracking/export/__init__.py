from .workbook import events_frame, shipments_frame, write_workbook

__all__ = ["events_frame", "shipments_frame", "write_workbook"]
