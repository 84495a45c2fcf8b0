# doc_checker/openmeter.py
import logging
import time
import uuid
from typing import Optional

import httpx

from doc_checker import config

logger = logging.getLogger(__name__)


# CloudEvents spec headers + JSON body
def _cloudevent(event_type: str, subject: str, user_id: str, data: dict):
    return {
        "specversion": "1.0",
        "id": str(uuid.uuid4()),
        "source": f"smart-doc-checker/{user_id}",
        "type": event_type,                 # e.g., doc.analyzed
        "subject": subject,                 # report id
        "time": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "datacontenttype": "application/json",
        "data": data or {}
    }


def enabled() -> bool:
    return bool(config.OPENMETER_API_KEY)


async def ingest_event(event_type: str, subject: str, user_id: str, units: int = 1,
                       extra: Optional[dict] = None,
                       client: Optional[httpx.AsyncClient] = None) -> bool:
    """
    Send one usage event. Returns False when metering is disabled or the
    ingest endpoint fails; counters shown to the user are unaffected either way.
    """
    if not enabled():
        return False
    evt = _cloudevent(event_type, subject, user_id, {"units": units, **(extra or {})})
    headers = {
        "Authorization": f"Bearer {config.OPENMETER_API_KEY}",
        "Content-Type": "application/cloudevents+json"
    }
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=5) as own:
                r = await own.post(f"{config.OPENMETER_API_URL}/api/v1/events", headers=headers, json=evt)
        else:
            r = await client.post(f"{config.OPENMETER_API_URL}/api/v1/events", headers=headers, json=evt)
        r.raise_for_status()
    except httpx.HTTPError as e:
        # fail-open: metering never blocks an analysis
        logger.warning("OpenMeter ingest of %s failed: %s", event_type, e)
        return False
    return True


async def meter_analysis(user_id: str, report_id: str, document_count: int,
                         client: Optional[httpx.AsyncClient] = None):
    await ingest_event("doc.analyzed", subject=report_id, user_id=user_id,
                       units=document_count, client=client)
    await ingest_event("report.generated", subject=report_id, user_id=user_id,
                       units=1, client=client)
