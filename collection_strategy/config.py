# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load and validate all configuration from environment
#   variables / .env file. Provides typed config objects
#   to all other modules.
#
# CLASSES:
# --------
# - MySQLConfig (dataclass)
#     host, port, user, password, database
#     debtors_table: str     (default "debtors")
#     debts_table: str       (default "debts")
#     strategy_table: str    (default "collection_strategies")
#
# - MongoConfig (dataclass)
#     host, port, user, password, database
#     collection: str        (default "collection_strategies")
#
# - PipelineConfig (dataclass)
#     max_workers: int           (default 1 = classify inline)
#     write_batch_size: int      (default 500)
#     policy_file: str | None    (default None = built-in policy)
#
# - AlertConfig (dataclass)
#     segment: str               (default "PREMIUM")
#     min_days: int              (default 60)
#     min_amount: Decimal        (default 0)
#
# - AppConfig (dataclass)
#     mysql, mongo, pipeline, alerts
#     sinks: list[str]           (default ["mysql"]; any of mysql, mongo)
#     debts_api_url: str | None  (default None = read debts from MySQL)
#     report_dir: str            (default "reports/")
#
# FUNCTION:
# ---------
# - get_config() -> AppConfig
#     Load .env using python-dotenv, construct AppConfig.
#     Returns the same singleton on repeated calls.
#
# USAGE:
# ------
#   from collection_strategy.config import get_config
#   config = get_config()
#   print(config.mysql.host)
#   print(config.pipeline.max_workers)
#
# ==============================================

import os
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional
from pathlib import Path

from dotenv import load_dotenv


@dataclass
class MySQLConfig:
    """MySQL database configuration."""
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = "root"
    database: str = "collections"
    debtors_table: str = "debtors"
    debts_table: str = "debts"
    strategy_table: str = "collection_strategies"


@dataclass
class MongoConfig:
    """MongoDB database configuration."""
    host: str = "localhost"
    port: int = 27017
    user: Optional[str] = None
    password: Optional[str] = None
    database: str = "collections"
    collection: str = "collection_strategies"


@dataclass
class PipelineConfig:
    """Classification run settings."""
    max_workers: int = 1
    write_batch_size: int = 500
    policy_file: Optional[str] = None


@dataclass
class AlertConfig:
    """Default thresholds for the critical-case alert list."""
    segment: str = "PREMIUM"
    min_days: int = 60
    min_amount: Decimal = Decimal("0")


@dataclass
class AppConfig:
    """Main application configuration."""
    mysql: MySQLConfig = field(default_factory=MySQLConfig)
    mongo: MongoConfig = field(default_factory=MongoConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    alerts: AlertConfig = field(default_factory=AlertConfig)
    sinks: List[str] = field(default_factory=lambda: ["mysql"])
    debts_api_url: Optional[str] = None
    report_dir: str = "reports/"


# Singleton instance
_config_instance: Optional[AppConfig] = None


def _split_list(raw: str) -> List[str]:
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


def get_config() -> AppConfig:
    """
    Load configuration from environment variables / .env file.
    Returns the same singleton instance on repeated calls.

    Returns:
        AppConfig: Application configuration
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    # Load .env file from project root
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)

    # Build MySQL configuration
    mysql_config = MySQLConfig(
        host=os.getenv("MYSQL_HOST", "localhost"),
        port=int(os.getenv("MYSQL_PORT", "3306")),
        user=os.getenv("MYSQL_USER", "root"),
        password=os.getenv("MYSQL_PASSWORD", "root"),
        database=os.getenv("MYSQL_DATABASE", "collections"),
        debtors_table=os.getenv("MYSQL_DEBTORS_TABLE", "debtors"),
        debts_table=os.getenv("MYSQL_DEBTS_TABLE", "debts"),
        strategy_table=os.getenv("MYSQL_STRATEGY_TABLE", "collection_strategies")
    )

    # Build MongoDB configuration
    mongo_config = MongoConfig(
        host=os.getenv("MONGO_HOST", "localhost"),
        port=int(os.getenv("MONGO_PORT", "27017")),
        user=os.getenv("MONGO_USER") or None,
        password=os.getenv("MONGO_PASSWORD") or None,
        database=os.getenv("MONGO_DATABASE", "collections"),
        collection=os.getenv("MONGO_COLLECTION", "collection_strategies")
    )

    # Build run configuration
    pipeline_config = PipelineConfig(
        max_workers=int(os.getenv("MAX_WORKERS", "1")),
        write_batch_size=int(os.getenv("WRITE_BATCH_SIZE", "500")),
        policy_file=os.getenv("POLICY_FILE") or None
    )

    # Build alert thresholds
    alert_config = AlertConfig(
        segment=os.getenv("ALERT_SEGMENT", "PREMIUM").strip().upper(),
        min_days=int(os.getenv("ALERT_MIN_DAYS", "60")),
        min_amount=Decimal(os.getenv("ALERT_MIN_AMOUNT", "0"))
    )

    # Build main application configuration
    _config_instance = AppConfig(
        mysql=mysql_config,
        mongo=mongo_config,
        pipeline=pipeline_config,
        alerts=alert_config,
        sinks=_split_list(os.getenv("SINKS", "mysql")),
        debts_api_url=os.getenv("DEBTS_API_URL") or None,
        report_dir=os.getenv("REPORT_DIR", "reports/")
    )

    return _config_instance
