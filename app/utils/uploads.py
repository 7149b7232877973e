import os
from fastapi import UploadFile
from app.core import config

async def read_text_upload(file: UploadFile) -> str:
    """Read an uploaded plain-text transcript; raises ValueError on anything else."""
    _, ext = os.path.splitext(file.filename or "")
    ext = ext.lower()
    if ext not in config.ALLOWED_EXTENSIONS:
        raise ValueError("Only .txt transcripts allowed")

    mime = (file.content_type or "").split(";")[0].strip()
    if mime and mime not in config.MIME_ALLOW[ext]:
        raise ValueError(f"Unexpected MIME type: {mime} for {ext}")

    chunks = []
    while True:
        chunk = await file.read(1 << 20)  # 1 MB
        if not chunk:
            break
        chunks.append(chunk)

    try:
        return b"".join(chunks).decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValueError("Transcript must be UTF-8 text")
