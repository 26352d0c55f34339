"""Sample procedures for local development (``flask seed-demo``)."""

from __future__ import annotations

import logging

from loto.models.procedure import Procedure
from loto.services.procedure_service import create_procedure

logger = logging.getLogger(__name__)

DEMO_PROCEDURES = [
    {
        "form_name": "Hydraulic Press 4",
        "form_description": "200 ton press, stamping line B",
        "procedure_number": "101",
        "facility": "Plant 2",
        "location": "Bay 14",
        "revision": "1",
        "isolation_points": "3",
        "machine_stop_sequence": "Press cycle stop, then main stop on operator panel",
        "isolate_sequence": "Open disconnect, bleed accumulator, block ram",
        "status": "in_progress",
        "sources": [
            {"source_type": "electrical", "source_id": "480V", "source_device": "Disconnect DS-14",
             "source_location": "North wall", "source_method": "Lock and tag",
             "source_check": "Try start"},
            {"source_type": "gravity", "source_id": "Ram", "source_device": "Ram blocks",
             "source_location": "Press bed", "source_method": "Install blocks",
             "source_check": "Visual"},
        ],
    },
    {
        "form_name": "Boiler Feed Pump",
        "form_description": "Feed water pump P-3",
        "procedure_number": "042",
        "facility": "Plant 1",
        "location": "Boiler room",
        "revision": "2",
        "isolation_points": "2",
        "status": "awaiting_approval",
        "favorite": True,
        "sources": [
            {"source_type": "electrical", "source_id": "4160V", "source_device": "Breaker 52-3"},
            {"source_type": "water", "source_id": "150 psi", "source_device": "Suction valve V-31"},
        ],
    },
    {
        "form_name": "Paint Booth Exhaust",
        "form_description": "Exhaust fan and gas heater",
        "procedure_number": "007",
        "facility": "Plant 2",
        "location": "Finishing",
        "revision": "0",
        "isolation_points": "2",
        "status": "completed",
        "completed_by": "J. Ortiz",
        "approved_by": "M. Chen",
        "approved_by_company": "Facilities",
        "sources": [
            {"source_type": "gas", "source_id": "Natural gas", "source_device": "Ball valve G-2"},
            {"source_type": "air", "source_id": "90 psi", "source_device": "Air drop A-7"},
        ],
    },
]


def seed_demo_procedures() -> int:
    """Create demo procedures whose names are not already present."""
    existing = {p.form_name for p in Procedure.query.all()}
    created = 0
    for payload in DEMO_PROCEDURES:
        if payload["form_name"] in existing:
            continue
        create_procedure(payload)
        created += 1
    logger.info("Demo seed created=%d skipped=%d", created, len(DEMO_PROCEDURES) - created)
    return created
