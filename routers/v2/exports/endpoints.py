import logging

import sentry_sdk
from fastapi import APIRouter, HTTPException

from routers.v2.exports.models import ExportPdfRequest
from routers.v2.exports.utils import pdf_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v2", tags=["Exports"], include_in_schema=True)


@router.post("/export-pdf", name="Export a CWL message to PDF")
async def export_pdf(body: ExportPdfRequest):
    try:
        return pdf_response(body.message)
    except Exception as e:
        logger.exception("PDF export failed")
        sentry_sdk.capture_exception(e, tags={"endpoint": "/v2/export-pdf"})
        raise HTTPException(status_code=500, detail="Errore nella generazione del PDF")
