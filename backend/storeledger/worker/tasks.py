import logging

import httpx
from celery import shared_task

from storeledger.core.celery_app import celery_app  # noqa: F401  (binds shared tasks to our app)
from storeledger.core.config import settings

logger = logging.getLogger(__name__)


@shared_task(name="storeledger.worker.tasks.print_receipt")
def print_receipt(endpoint: str, payload: dict) -> dict:
    """
    POST one warehouse's share of an invoice to its receipt printer.

    Printer failures are logged and reported in the result; they never
    propagate back to the sale that queued the job.
    """
    invoice_id = payload.get("invoice_id")
    logger.info("Sending print request to %s for %s", endpoint, invoice_id)
    try:
        response = httpx.post(endpoint, json=payload, timeout=settings.PRINTER_TIMEOUT_SECONDS)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.error("Failed to print %s via %s: %s", invoice_id, endpoint, exc)
        return {"status": "failed", "invoice_id": invoice_id, "error": str(exc)}

    logger.info("Printer at %s answered %s for %s", endpoint, response.status_code, invoice_id)
    return {"status": "printed", "invoice_id": invoice_id, "http_status": response.status_code}
