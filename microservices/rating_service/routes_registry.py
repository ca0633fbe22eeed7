"""
Rating Service Routes Registry
Defines all API routes for service registration.
"""
from typing import List, Dict, Any

SERVICE_ROUTES = [
    # Health and Service Info
    {
        "path": "/health",
        "methods": ["GET"],
        "auth_required": False,
        "description": "Basic health check endpoint"
    },
    {
        "path": "/api/v1/rating/info",
        "methods": ["GET"],
        "auth_required": False,
        "description": "Service name, version and supported service kinds"
    },
    # Rating
    {
        "path": "/api/v1/rating/rate",
        "methods": ["POST"],
        "auth_required": True,
        "description": "Rate one usage record or a list of records"
    },
    {
        "path": "/api/v1/rating/batch",
        "methods": ["POST"],
        "auth_required": True,
        "description": "Rate a batch of records with statistics and revenue summary"
    },
]


def get_routes_metadata() -> Dict[str, Any]:
    """
    Generate compact route metadata for service registration.
    Registry metadata values are limited to 512 characters.
    """
    health_routes = []
    rating_routes = []

    for route in SERVICE_ROUTES:
        path = route["path"]
        compact_path = path.replace("/api/v1/rating/", "")

        if path.startswith("/health") or path.endswith("/info"):
            health_routes.append(compact_path)
        else:
            rating_routes.append(compact_path)

    return {
        "route_count": str(len(SERVICE_ROUTES)),
        "base_path": "/api/v1/rating",
        "health": ",".join(health_routes),
        "rating": ",".join(rating_routes),
        "methods": "GET,POST",
        "public_count": str(sum(1 for r in SERVICE_ROUTES if not r["auth_required"])),
        "protected_count": str(sum(1 for r in SERVICE_ROUTES if r["auth_required"])),
    }


def get_all_routes() -> List[Dict[str, Any]]:
    """Full route table"""
    return list(SERVICE_ROUTES)


# Service metadata
SERVICE_METADATA = {
    "service_name": "rating_service",
    "version": "1.0.0",
    "tags": ["v1", "settlement", "rating", "charge-calculation"],
    "capabilities": [
        "voice_rating",
        "sms_rating",
        "prefix_based_rating",
        "minimum_charge_enforcement",
        "duration_rounding",
        "partner_status_validation",
        "batch_statistics"
    ]
}
