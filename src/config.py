"""Configuration for the application."""

from pathlib import Path

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ParameterSourceConfig(BaseModel):
    """Mapping of one process parameter onto a data-source column."""

    source_column: str = Field(..., description="Column name in the data source")
    display_name: str = Field(default="", description="Human-readable name")
    enabled: bool = Field(default=True, description="Whether the parameter is ingested")
    display_min: float = Field(default=0.0, description="Lower bound of chart axis")
    display_max: float = Field(default=100.0, description="Upper bound of chart axis")


def _default_parameters() -> dict[str, ParameterSourceConfig]:
    return {
        "mud_level": ParameterSourceConfig(
            source_column="MudLevelOUT (cm3/min)", display_name="Mud Level", display_min=-1, display_max=2
        ),
        "tdegasser": ParameterSourceConfig(
            source_column="TdegasserOUT (degC)", display_name="T Degasser", display_min=0, display_max=150
        ),
        "qmud": ParameterSourceConfig(
            source_column="QmudOUT (cm3/min)", display_name="Q Mud", display_min=0, display_max=400
        ),
        "pgasline": ParameterSourceConfig(
            source_column="PgaslineOUT (mbar)", display_name="P Gas Line", display_min=0, display_max=400
        ),
        "ppump": ParameterSourceConfig(
            source_column="PpumpOUT (mbar)", display_name="P Pump", display_min=0, display_max=150
        ),
        "qpump": ParameterSourceConfig(
            source_column="QpumpOUT (cm3/min)", display_name="Q Pump", display_min=0, display_max=700
        ),
    }


class PathsConfig(BaseSettings):
    """Configuration for file locations."""

    model_config = SettingsConfigDict(env_prefix="QC_", env_file=".env", extra="ignore")

    config_dir: Path = Field(default=Path("./config"), description="Directory holding thresholds and rules")
    audit_dir: Path = Field(default=Path("./data/audit"), description="Directory for the incident log")
    logs_dir: Path = Field(default=Path("./logs"), description="Directory for application logs")
    thresholds_file: str = Field(default="thresholds.yaml", description="Threshold file name")
    rules_file: str = Field(default="rules.yaml", description="Rule file name")
    incident_log_file: str = Field(default="incidents.jsonl", description="Incident log file name")

    @property
    def thresholds_path(self) -> Path:
        return self.config_dir / self.thresholds_file

    @property
    def rules_path(self) -> Path:
        return self.config_dir / self.rules_file

    @property
    def incident_log_path(self) -> Path:
        return self.audit_dir / self.incident_log_file


class MonitorConfig(BaseSettings):
    """Configuration for status evaluation and diagnosis."""

    model_config = SettingsConfigDict(env_prefix="MONITOR_", env_file=".env", extra="ignore")

    missing_value: float = Field(default=-999.25, description="Sentinel marking a missing reading")
    history_size: int = Field(default=120, ge=1, le=120, description="Samples kept per parameter (2 min at 1 Hz)")
    trend_window: int = Field(default=20, ge=2, description="Samples used for the trend fit")

    @model_validator(mode="after")
    def check_trend_window(self) -> "MonitorConfig":
        if self.trend_window > self.history_size:
            raise ValueError(f"trend_window ({self.trend_window}) exceeds history_size ({self.history_size})")
        return self


class TimestampConfig(BaseSettings):
    """Configuration for the timestamp column of the data source."""

    model_config = SettingsConfigDict(env_prefix="TIMESTAMP_", env_file=".env", extra="ignore")

    source_column: str = Field(default="Time(Sec)", description="Timestamp column name")
    format: str = Field(default="seconds", description="'seconds' (offset from 2024-01-01) or 'datetime'")
    unit: str = Field(default="s", description="Offset unit, 's' or 'ms'")


class DataSourceConfig(BaseSettings):
    """Configuration for the reading source."""

    model_config = SettingsConfigDict(env_prefix="DATA_SOURCE_", env_file=".env", extra="ignore")

    type: str = Field(default="file", description="Source type")
    file_path: str = Field(default="", description="CSV file to replay")
    playback_speed: float = Field(default=1.0, description="Replay speed multiplier, <= 0 disables sleeping")
    parameters: dict[str, ParameterSourceConfig] = Field(default_factory=_default_parameters)


class LoggingConfig(BaseSettings):
    """Configuration for logging."""

    model_config = SettingsConfigDict(env_prefix="LOG_", env_file=".env", extra="ignore")

    level: str = Field(default="INFO", description="Console log level")
    file_level: str = Field(default="INFO", description="File log level")
    file_name: str = Field(default="app.log", description="Log file name inside logs_dir")
    rotation: str = Field(default="100 MB", description="Log rotation threshold")
    retention: str = Field(default="30 days", description="Log retention")
    colorize: bool = Field(default=True, description="Colorize console output")


class AppConfig(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    paths: PathsConfig = Field(default_factory=PathsConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    data_source: DataSourceConfig = Field(default_factory=DataSourceConfig)
    timestamp: TimestampConfig = Field(default_factory=TimestampConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
