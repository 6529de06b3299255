from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central application configuration."""

    PROJECT_NAME: str = "Store Ledger Backend"
    API_V1_PREFIX: str = "/api/v1"
    ENVIRONMENT: str = Field(default="local", validation_alias="ENV", description="Deployment environment")

    # Database
    DATABASE_URL: str = Field(...)

    # Background jobs (Celery/Redis)
    CELERY_BROKER_URL: str = Field(default="redis://localhost:6379/0")
    CELERY_RESULT_BACKEND: str = Field(default="redis://localhost:6379/1")

    # Receipt printers attached to warehouses
    RECEIPT_PRINTING_ENABLED: bool = Field(default=True)
    PRINTER_TIMEOUT_SECONDS: float = Field(default=5.0)

    # Whether voiding a sale also appends compensating ledger entries
    VOID_REVERSES_LEDGER: bool = Field(default=False)

    # Tenant scoping header supplied by the auth layer
    STORE_HEADER: str = Field(default="X-Store-Id")

    # Observability
    LOG_LEVEL: str = Field(default="INFO")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
