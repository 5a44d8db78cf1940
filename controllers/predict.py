import os

import httpx
from dotenv import load_dotenv
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

load_dotenv()

router = APIRouter()

BACKEND_URL = os.getenv("BACKEND_API_URL", "http://localhost:8000")
BACKEND_TIMEOUT_SECONDS = float(os.getenv("BACKEND_TIMEOUT_SECONDS", "30"))
FORWARDED_FILENAME = "skin-photo.jpg"


def _backend_client() -> httpx.AsyncClient:
    timeout = httpx.Timeout(BACKEND_TIMEOUT_SECONDS, connect=5.0)
    return httpx.AsyncClient(timeout=timeout)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@router.post("/api/predict")
async def predict(request: Request):
    """
    Relay an uploaded skin photo to the inference backend.
    Backend error details stay in the server log.
    """
    try:
        form = await request.form()
        file = form.get("file")
        if not isinstance(file, UploadFile):
            return _error("No file uploaded", 400)

        content = await file.read()
        files = {"file": (FORWARDED_FILENAME, content, file.content_type or "image/jpeg")}

        async with _backend_client() as client:
            res = await client.post(f"{BACKEND_URL}/predict", files=files)

        if not res.is_success:
            print(f" [!] Backend error ({res.status_code}): {res.text}")
            return _error("Backend analysis failed", 500)

        return JSONResponse(res.json())
    except Exception as exc:
        print(f" [!] Predict API error: {exc!r}")
        return _error("Internal server error", 500)
