"""HTTP server settings."""

from typing import List

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class ServerSettings(InfrastructureSettings):
    """Where uvicorn binds and which browser origins may call the API.

    Environment Variables:
        HOST: Bind address (default: 0.0.0.0)
        PORT: Bind port (default: 8000)
        CORS_ALLOW_ORIGINS: Origins allowed outside production
    """

    HOST: str = Field(default="0.0.0.0", alias="HOST")
    PORT: int = Field(default=8000, alias="PORT")
    CORS_ALLOW_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        alias="CORS_ALLOW_ORIGINS",
    )
