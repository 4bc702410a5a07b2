"""API router package for endpoint composition."""

from .health import api_create_health_router
from .jobs import api_create_jobs_router
from .messages import api_create_messages_router
from .segments import api_create_segments_router

__all__ = [
	"api_create_health_router",
	"api_create_jobs_router",
	"api_create_messages_router",
	"api_create_segments_router",
]
