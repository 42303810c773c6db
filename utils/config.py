"""
Service configuration loaded from the environment.

Values are read from environment variables set on the Lambda function. For
local development a ``.env`` file is loaded with python-dotenv so the same
variable names can be used outside AWS.
"""

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

# Load .env file for local development
load_dotenv()

PRODUCTION_ENVIRONMENTS = {"prod", "production"}


class ServiceConfig(BaseModel):
    """Configuration shared by the order and product services."""

    table_name: str = "OrderTable"
    product_table_name: str = "ProductTable"
    service_name: str = "order-service"
    domain: str = "order"
    country: str = "GB"
    environment: str = "development"
    log_level: str = "INFO"
    metrics_namespace: str = "OrderService"
    dynamodb_endpoint: Optional[str] = None

    @property
    def is_production(self) -> bool:
        """Stack traces are hidden from error responses in production."""
        return self.environment.lower() in PRODUCTION_ENVIRONMENTS

    @property
    def metric_dimensions(self) -> dict:
        return {
            "service": self.service_name,
            "domain": self.domain,
            "country": self.country,
            "environment": self.environment,
        }

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """
        Build the configuration from environment variables.

        Unset variables fall back to the field defaults.
        """
        env_map = {
            "table_name": "TABLE_NAME",
            "product_table_name": "PRODUCT_TABLE_NAME",
            "service_name": "SERVICE_NAME",
            "domain": "DOMAIN",
            "country": "COUNTRY",
            "environment": "ENVIRONMENT",
            "log_level": "LOG_LEVEL",
            "metrics_namespace": "METRICS_NAMESPACE",
            "dynamodb_endpoint": "DYNAMODB_ENDPOINT",
        }
        values = {
            field: os.environ[var] for field, var in env_map.items() if os.getenv(var)
        }
        return cls(**values)


@lru_cache(maxsize=1)
def get_config() -> ServiceConfig:
    """Get the cached service configuration."""
    return ServiceConfig.from_env()


def clear_config_cache() -> None:
    """Clear the cached configuration. Useful for testing or config updates."""
    get_config.cache_clear()
