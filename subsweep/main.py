"""
SubSweep - Open Source Subdomain Enumeration Tool
Author: ha-2
GitHub: https://github.com/ha-2
License: CC BY-NC 4.0
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from datetime import datetime
import logging

from subsweep.config import get_settings
from subsweep.errors import AllProvidersFailedError, InvalidDomainError
from subsweep.schemas import ScanRequest, ScanResponse, SubdomainInfo
from subsweep.services.subdomain_enum import scan_domain

settings = get_settings()

# Set up logging
logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(
    title="SubSweep API",
    description="Subdomain enumeration tool",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


@app.post("/scan", response_model=ScanResponse)
async def scan_subdomains(request: ScanRequest):
    """Scan subdomains for a given domain"""
    started_at = datetime.now()

    try:
        result = await scan_domain(request.domain, mode=request.mode, settings=settings)
    except InvalidDomainError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AllProvidersFailedError as e:
        raise HTTPException(status_code=502, detail={
            "message": "All sources unreachable",
            "failures": [failure.model_dump(mode="json") for failure in e.failures],
        })

    return ScanResponse(
        domain=result.domain,
        started_at=started_at,
        finished_at=datetime.now(),
        subdomains=[SubdomainInfo(host=host, sources=result.sources.get(host, [])) for host in result.records],
        total_subdomains=result.count,
        failed_providers=result.failures,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
