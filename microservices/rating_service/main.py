"""
Rating Microservice API

REST API for usage rating and charge calculation
"""

from fastapi import FastAPI, HTTPException, Depends, Body, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import List, Optional, Union

from core.config import get_settings
from core.logger import setup_service_logger

from .factory import create_rating_service
from .models import (
    HealthResponse,
    RateRecordsResponse,
    RatingBatchRequest,
    RatingBatchResult,
    ServiceInfo,
    UsageRecord,
)
from .protocols import BatchValidationError, RepositoryUnavailableError
from .rating_service import RatingService
from .routes_registry import SERVICE_METADATA, get_routes_metadata

settings = get_settings()
config = settings.rating

# Configure logging
logger = setup_service_logger(config.service_name, level=settings.logging.log_level)

# Globals
rating_service: Optional[RatingService] = None
SERVICE_PORT = config.service_port


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    global rating_service

    try:
        rating_service = create_rating_service(settings)
        await rating_service.repository.initialize()
        route_meta = get_routes_metadata()
        logger.info(
            f"Rating service started on port {SERVICE_PORT} "
            f"({route_meta['route_count']} routes, tags={','.join(SERVICE_METADATA['tags'])})"
        )
        yield

    except Exception as e:
        logger.error(f"Failed to initialize rating service: {e}")
        raise
    finally:
        if rating_service:
            await rating_service.repository.close()
            logger.info("Rating service database connections closed")


app = FastAPI(
    title="Rating Service",
    description="Usage rating and charge calculation for interconnect and roaming traffic",
    version=config.version,
    lifespan=lifespan
)


# ====================
# Dependency injection
# ====================

async def get_rating_service() -> RatingService:
    """Get rating service instance"""
    if not rating_service:
        raise HTTPException(status_code=503, detail="Rating service not initialized")
    return rating_service


# ====================
# Health and service info
# ====================

@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check"""
    dependencies = {}

    if rating_service:
        health = await rating_service.repository.health_check()
        dependencies["database"] = "healthy" if health and health.get("healthy") else "unhealthy"
    else:
        dependencies["database"] = "unhealthy"

    return HealthResponse(
        status="healthy" if all(v == "healthy" for v in dependencies.values()) else "degraded",
        service=config.service_name,
        port=SERVICE_PORT,
        version=config.version,
        dependencies=dependencies
    )


@app.get("/api/v1/rating/info", response_model=ServiceInfo)
async def get_service_info(service: RatingService = Depends(get_rating_service)):
    """Liveness / capability probe"""
    info = service.get_service_info()
    info.metadata["tags"] = SERVICE_METADATA["tags"]
    info.metadata["routes"] = get_routes_metadata()
    return info


# ====================
# Rating API
# ====================

@app.post("/api/v1/rating/rate", response_model=RateRecordsResponse)
async def rate_records(
    payload: Union[List[UsageRecord], UsageRecord] = Body(...),
    service: RatingService = Depends(get_rating_service)
):
    """Rate one record or a list of records"""
    try:
        batch = await service.rate_records(payload)
        return RateRecordsResponse(
            success=True,
            processed_count=batch.processed_count,
            records=batch.records
        )

    except BatchValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RepositoryUnavailableError as e:
        logger.error(f"Rate repository unavailable: {e}")
        raise HTTPException(status_code=503, detail="Rate repository unavailable")
    except Exception as e:
        logger.error(f"Error rating records: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Rating engine processing failed")


@app.post("/api/v1/rating/batch", response_model=RatingBatchResult)
async def rate_batch(
    request: RatingBatchRequest,
    service: RatingService = Depends(get_rating_service)
):
    """Rate a batch of records with statistics, revenue and grouped errors"""
    try:
        return await service.rate_records(request.records)

    except BatchValidationError as e:
        detail = {"error": str(e)}
        if e.provided:
            detail["provided"] = e.provided
        raise HTTPException(status_code=400, detail=detail)
    except RepositoryUnavailableError as e:
        logger.error(f"Rate repository unavailable: {e}")
        raise HTTPException(status_code=503, detail="Rate repository unavailable")
    except Exception as e:
        logger.error(f"Batch processing error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Batch processing failed")


# ====================
# Error handling
# ====================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception in {request.url}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error occurred"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "microservices.rating_service.main:app",
        host=config.service_host,
        port=SERVICE_PORT,
        reload=settings.debug,
        log_level=settings.logging.log_level.lower()
    )
