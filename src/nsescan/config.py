"""
Configuration management for the nsescan screener.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator


DEFAULT_SECTORS: List[str] = [
    "Nifty Auto",
    "Nifty Bank",
    "Nifty Energy",
    "Nifty Financial Services",
    "Nifty FMCG",
    "Nifty IT",
    "Nifty Media",
    "Nifty Metal",
    "Nifty MNC",
    "Nifty Pharma",
    "Nifty PSU Bank",
    "Nifty Realty",
    "Nifty India Consumption",
    "Nifty Commodities",
    "Nifty Infrastructure",
    "Nifty PSE",
    "Nifty Services Sector",
    "Nifty Oil & Gas",
    "Nifty Healthcare Index",
    "Nifty Consumer Durables",
]


class DataSourceConfig(BaseModel):
    """Upstream market data API configuration."""

    base_url: str = Field(default="http://localhost:3000/api")
    timeout_seconds: float = Field(default=10.0, gt=0, le=300)

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class AnalysisConfig(BaseModel):
    """Screening run parameters."""

    max_concurrency: int = Field(default=5, ge=1, le=50)
    sectors: List[str] = Field(default_factory=lambda: list(DEFAULT_SECTORS))

    @field_validator('sectors')
    @classmethod
    def validate_sectors(cls, v: List[str]) -> List[str]:
        sectors = [s.strip() for s in v if s.strip()]
        if not sectors:
            raise ValueError("At least one sector must be configured")
        return sectors


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO")
    file_path: Optional[str] = Field(default="./logs/nsescan.log")
    max_size: str = Field(default="10MB")
    backup_count: int = Field(default=5, ge=0)


class Config(BaseModel):
    """Main configuration class."""

    datasource: DataSourceConfig = Field(default_factory=DataSourceConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load_from_env(cls, env_file: Optional[str] = None) -> "Config":
        """Load configuration from environment variables."""
        if env_file:
            load_dotenv(env_file)
        else:
            env_path = Path(".env")
            if env_path.exists():
                load_dotenv(env_path)

        datasource = DataSourceConfig(
            base_url=os.getenv("NSESCAN_API_BASE_URL", "http://localhost:3000/api"),
            timeout_seconds=float(os.getenv("NSESCAN_TIMEOUT", "10.0"))
        )

        analysis = AnalysisConfig(
            max_concurrency=int(os.getenv("NSESCAN_MAX_CONCURRENCY", "5"))
        )
        sectors = os.getenv("NSESCAN_SECTORS")
        if sectors:
            analysis = AnalysisConfig(
                max_concurrency=analysis.max_concurrency,
                sectors=sectors.split(",")
            )

        # An empty LOG_FILE_PATH disables the file handler
        logging = LoggingConfig(
            level=os.getenv("LOG_LEVEL", "INFO"),
            file_path=os.getenv("LOG_FILE_PATH", "./logs/nsescan.log") or None,
            max_size=os.getenv("LOG_MAX_SIZE", "10MB"),
            backup_count=int(os.getenv("LOG_BACKUP_COUNT", "5"))
        )

        return cls(
            datasource=datasource,
            analysis=analysis,
            logging=logging
        )
