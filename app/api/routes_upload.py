import logging
from fastapi import APIRouter, UploadFile, File, HTTPException
from app.api.routes_analyze import result_payload
from app.services.analyze import analyze
from app.utils.uploads import read_text_upload

log = logging.getLogger("routes_upload")

router = APIRouter(tags=["analyze"])

@router.post("/analyze/file")
async def analyze_file(file: UploadFile = File(...)):
    try:
        text = await read_text_upload(file)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    log.info("file analysis type=transcript chars=%d", len(text))
    return result_payload(analyze(text))
