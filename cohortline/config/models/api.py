"""Query API server configuration."""

from pydantic import BaseModel, Field


class APIConfig(BaseModel):
    """HTTP server for the cohort query surface."""

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8080, ge=1, le=65535, description="Bind port")
