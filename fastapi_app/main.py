import logging
from typing import Any, Dict

from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.invoicing.config import load_config
from src.invoicing.errors import ConfigLoadError, InvoiceError, ResponseEncodeError
from src.invoicing.service import create_invoice, decode_provider_response

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
)

app = FastAPI(
    title="Invoice Creation API (FastAPI + ezPay)",
    description="Post an invoice request as JSON and get ezPay's answer back.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST"],
    allow_headers=["Content-Type"],
    max_age=3600,
)

@app.exception_handler(RequestValidationError)
async def payload_error_handler(request: Request, exc: RequestValidationError):
    """
    A body that is not a JSON object is a bad request, not a 422.
    """
    logging.error("decoding payload error: %s", exc.errors())
    return JSONResponse(status_code=400, content={"detail": "decoding payload error"})

@app.get("/health")
def health_check():
    """
    Simple health endpoint so we can check the service is running.
    """
    return {"status": "ok"}

@app.post("/invoices")
def create_invoice_endpoint(payload: Dict[str, Any] = Body(...)):
    """
    Accepts an invoice request, validates and encrypts it,
    forwards it to ezPay and returns ezPay's response.
    """
    # 1) Provider config for this request
    try:
        config = load_config()
    except ConfigLoadError as e:
        logging.error("load config encounter error: %s", e)
        raise HTTPException(
            status_code=500,
            detail="Failed to load provider configuration.",
        ) from e

    # 2) Call shared service logic
    try:
        resp = create_invoice(payload, config)
    except InvoiceError as e:
        logging.error("invoice creation error: %s", e)
        raise HTTPException(
            status_code=400,
            detail=f"invoice creation error: {e}",
        ) from e

    # 3) Return ezPay's answer as JSON
    try:
        content = decode_provider_response(resp)
    except ResponseEncodeError as e:
        logging.error("json encode resp error: %s", e)
        raise HTTPException(status_code=500, detail=str(e)) from e

    return JSONResponse(content=content)
