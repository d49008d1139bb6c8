from .routes import router
from .schemas import (
    HealthResponse,
    ModuleSummaryRequest,
    SummariesRequest,
    SummariesResponse,
    SummaryRequest,
    SummaryResponse,
)

__all__ = [
    "router",
    "HealthResponse",
    "ModuleSummaryRequest",
    "SummariesRequest",
    "SummariesResponse",
    "SummaryRequest",
    "SummaryResponse",
]
