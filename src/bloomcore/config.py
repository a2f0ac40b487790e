from pathlib import Path
from typing import Any, Optional, Sequence

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from bloomcore.filter import Filter


class FilterConfig(BaseModel):
    """Sizing for a filter, given either as a load target or as a geometry.

    ``capacity`` and ``hash_count`` win when both are set; mixing them with
    an explicit ``expected_elements`` or ``error_rate`` is rejected.
    """

    model_config = ConfigDict(frozen=True)

    expected_elements: int = Field(default=1000, ge=1)
    error_rate: float = Field(default=0.01, gt=0.0, lt=1.0)
    capacity: Optional[int] = Field(default=None, ge=1)
    hash_count: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _check_single_sizing(self) -> "FilterConfig":
        if (self.capacity is None) != (self.hash_count is None):
            raise ValueError("capacity and hash_count must be given together")
        if self.sized and self.model_fields_set & {"expected_elements", "error_rate"}:
            raise ValueError(
                "give either expected_elements/error_rate or capacity/hash_count, not both"
            )
        return self

    @property
    def sized(self) -> bool:
        return self.capacity is not None

    def build(self) -> Filter:
        if self.sized:
            return Filter.with_capacity(self.capacity, self.hash_count)  # type: ignore[arg-type]
        return Filter(self.expected_elements, self.error_rate)


class EvaluationConfig(BaseModel):
    """Workload used to measure a filter's false positive rate empirically."""

    model_config = ConfigDict(validate_assignment=True)

    positives: int = Field(default=1000, gt=0)
    negatives: int = Field(default=10000, gt=0)
    key_bytes: int = Field(default=8, gt=0)
    seeds: Sequence[int] = Field(default_factory=lambda: (17, 23, 71))
    tolerance: float = Field(default=2.0, gt=0.0)


class BloomConfig(BaseModel):
    filter: FilterConfig = Field(default_factory=FilterConfig)
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)


class ConfigLoader:
    """Loads ``BloomConfig`` from YAML files with ``filter``/``evaluation`` sections."""

    def load(self, path: Path) -> BloomConfig:
        return BloomConfig.model_validate(self._read_yaml(path))

    def _read_yaml(self, path: Path) -> dict[str, Any]:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
        return data or {}
