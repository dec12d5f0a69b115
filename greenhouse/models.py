from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

METRIC_FIELDS: tuple[str, ...] = ("humidity", "light", "temperature")


class SensorRecordModel(BaseModel):
    """Body of one entry under the feed path, keyed by its YYYYMMDD_HHMMSS stamp."""

    model_config = ConfigDict(extra="ignore")

    humidity: float | None = None
    light: float | None = None
    temperature: float | None = None


@dataclass(frozen=True)
class Reading:
    time: int  # epoch milliseconds
    humidity: float | None = None
    light: float | None = None
    temperature: float | None = None

    @classmethod
    def zero(cls, time: int) -> "Reading":
        return cls(time=time, humidity=0.0, light=0.0, temperature=0.0)

    def metric(self, name: str) -> float | None:
        if name not in METRIC_FIELDS:
            raise KeyError(name)
        return getattr(self, name)
