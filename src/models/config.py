"""
Configuration models

Typed view of config/traffic_manager.yaml. Every section has complete
defaults so a missing or partial file still yields a usable configuration.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from models.enums import LogLevel


class ConnectionConfig(BaseModel):
    """Simulator endpoint and request timeouts"""
    host: str = "localhost"
    port: int = Field(2000, ge=1, le=65535)
    timeout: float = Field(
        2.0,
        gt=0,
        description="Request timeout applied once actors are spawned (seconds)"
    )
    startup_timeout: float = Field(
        10.0,
        gt=0,
        description="Request timeout while connecting and spawning (seconds)"
    )


class TrafficConfig(BaseModel):
    """How many actors to spawn and how to pick their spawn points"""
    target_count: int = Field(0, ge=0, description="0 = one actor per spawn point")
    seed: int = Field(-1, description="Negative = seed from the clock")


class SupervisorConfig(BaseModel):
    poll_interval: float = Field(1.0, gt=0)


class PipelineConfig(BaseModel):
    """Worker pipeline threading and actuation"""
    worker_count: Optional[int] = Field(None, ge=1, description="None = detected core count")
    cycle_interval: float = Field(0.05, gt=0)
    target_speed_kmh: float = Field(25.0, ge=0)
    start_timeout: float = Field(5.0, gt=0)

    @property
    def target_speed_mps(self) -> float:
        return self.target_speed_kmh / 3.6


class SimulationConfig(BaseModel):
    """Offline simulated endpoint"""
    spawn_points: int = Field(200, ge=0)


class LoggingConfig(BaseModel):
    level: LogLevel = LogLevel.INFO
    use_colors: bool = True

    @field_validator("level", mode="before")
    @classmethod
    def parse_level(cls, value):
        if isinstance(value, str):
            try:
                return LogLevel[value.upper()]
            except KeyError:
                raise ValueError(f"Unknown log level: {value}")
        return value


class AppConfig(BaseModel):
    """Root configuration object"""
    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)
    traffic: TrafficConfig = Field(default_factory=TrafficConfig)
    supervisor: SupervisorConfig = Field(default_factory=SupervisorConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
