"""Models describing how a receipt's points were awarded."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FieldError(BaseModel):
    """A receipt field that could not be parsed."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(..., description="Wire name of the offending field")
    value: str = Field(..., description="Raw value as submitted")
    reason: str = Field(..., description="Why the value was rejected")


class RuleResult(BaseModel):
    """Points contributed by a single scoring rule."""

    model_config = ConfigDict(frozen=True)

    rule: str = Field(..., description="Rule identifier")
    points: int = Field(..., description="Points contributed by this rule")
    reason: str = Field(..., description="Human readable explanation")


class PointsBreakdown(BaseModel):
    """Per-rule breakdown of a receipt's score."""

    model_config = ConfigDict(frozen=True)

    rules: tuple[RuleResult, ...] = Field(default_factory=tuple)
    errors: tuple[FieldError, ...] = Field(
        default_factory=tuple,
        description="Fields that failed to parse and were scored as zero",
    )

    @property
    def total(self) -> int:
        """Total score, always the sum of the rule contributions."""
        return sum(result.points for result in self.rules)

    def points_for(self, rule: str) -> int:
        """Points contributed by the named rule."""
        return sum(result.points for result in self.rules if result.rule == rule)
