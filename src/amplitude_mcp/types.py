"""Request and response types for amplitude_mcp operations.

Request types are pydantic models: they are used both as tool input schemas
(FastMCP derives the JSON schema from them) and to validate a request before
any network call is made. All request models are frozen.

Response types model the parts of the Amplitude payloads that the formatters
read. Every field is optional and unknown fields are kept, because the raw
payload is always returned to the caller alongside the summary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from amplitude_mcp._literal_types import (
    BreakdownType,
    FilterOperator,
    FunnelMode,
    Interval,
    RetentionType,
    SegmentOperator,
)

# =============================================================================
# Request Types
# =============================================================================

DateString = Annotated[
    str,
    Field(pattern=r"^\d{8}", description="Date in YYYYMMDD format"),
]
"""Date accepted by the Dashboard REST API (8-digit prefix required)."""

PropertyValue = str | int | float | bool | list[str]
"""Value a property filter compares against."""


class PropertyFilter(BaseModel):
    """A single comparison on an event property."""

    model_config = ConfigDict(frozen=True)

    property_name: str = Field(description="Name of the event property to filter on")
    """Property to compare."""

    value: PropertyValue = Field(description="Value to match")
    """Scalar or list of values; scalars are sent as a one-element list."""

    op: FilterOperator = Field(description="Comparison operator")
    """Comparison operator."""


class EventSpec(BaseModel):
    """An event referenced by name only."""

    model_config = ConfigDict(frozen=True)

    event_type: str = Field(
        min_length=1,
        description="Event name to query (e.g., 'page_viewed', 'button_clicked')",
    )
    """Event name as tracked in Amplitude."""


class EventWithFilters(EventSpec):
    """An event with optional property filters."""

    property_filters: list[PropertyFilter] | None = Field(
        default=None, description="Optional filters on event properties"
    )
    """Filters applied to this event only."""


class RetentionEvent(BaseModel):
    """Start or return event of a retention query."""

    model_config = ConfigDict(frozen=True)

    event_type: str = Field(
        min_length=1,
        description="Event name (e.g., 'sign_up', 'page_viewed')",
    )
    """Event name as tracked in Amplitude."""

    filters: list[PropertyFilter] | None = Field(
        default=None, description="Optional filters on the event"
    )
    """Filters applied to this event only."""


class Breakdown(BaseModel):
    """A grouping dimension for segmentation results."""

    model_config = ConfigDict(frozen=True)

    type: BreakdownType = Field(
        description="'event' for event properties, 'user' for user properties"
    )
    """Property scope."""

    property_name: str = Field(
        description="Actual property name like 'platform', 'country', 'device_type'"
    )
    """Property to group by."""


class SegmentCondition(BaseModel):
    """One condition of a user segment."""

    model_config = ConfigDict(frozen=True)

    prop: str = Field(
        description="Property name (use 'gp:name' for custom user properties)"
    )
    """User property to test."""

    op: SegmentOperator = Field(description="Comparison operator")
    """Comparison operator."""

    values: list[str] = Field(description="Values to match")
    """Values the property is compared against."""


class SegmentationRequest(BaseModel):
    """Event segmentation query.

    Only the first event is queried by the Dashboard REST API call this
    request is translated into; extra events are accepted but ignored.
    """

    model_config = ConfigDict(frozen=True)

    events: list[EventWithFilters] = Field(min_length=1)
    start: DateString
    end: DateString
    interval: Interval | None = "day"
    breakdowns: list[Breakdown] | None = None


class FunnelRequest(BaseModel):
    """Ordered funnel of 2 to 10 events."""

    model_config = ConfigDict(frozen=True)

    events: list[EventWithFilters] = Field(min_length=2, max_length=10)
    start: DateString
    end: DateString
    mode: FunnelMode = "this order"
    conversion_window: int | None = Field(default=None, ge=0)
    segment: list[SegmentCondition] | None = None
    group_by: str | None = None


class RetentionRequest(BaseModel):
    """Retention between a start event and a return event."""

    model_config = ConfigDict(frozen=True)

    start_event: RetentionEvent
    return_event: RetentionEvent
    start: DateString
    end: DateString
    retention_type: RetentionType = "bracket"
    segment: list[SegmentCondition] | None = None
    group_by: str | None = None


# =============================================================================
# Response Types
# =============================================================================


class TaxonomyEvent(BaseModel):
    """Event type entry from ``/taxonomy/event``."""

    model_config = ConfigDict(extra="allow")

    value: str | None = None
    name: str | None = None
    display: str | None = None
    totals: int | float | None = None
    deleted: bool | None = None
    hidden: bool | None = None

    @property
    def is_active(self) -> bool:
        """Whether the event is neither deleted nor hidden."""
        return not self.deleted and not self.hidden

    @property
    def event_type(self) -> str:
        """Event name, preferring ``value`` over ``name``."""
        return self.value or self.name or ""

    @property
    def display_name(self) -> str:
        """Display name, falling back to ``name`` then ``value``."""
        return self.display or self.name or self.value or ""


class TaxonomyProperty(BaseModel):
    """Event or user property entry from the taxonomy endpoints.

    The API uses two naming conventions; ``name``/``type`` win over
    ``property_name``/``property_type`` when both are present.
    """

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    property_name: str | None = None
    type: str | None = None
    property_type: str | None = None
    description: str | None = None
    is_enum: bool | None = None
    enum_values: list[Any] | None = None

    @property
    def display_name(self) -> str:
        """Property name: ``name``, then ``property_name``, then "unknown"."""
        return self.name or self.property_name or "unknown"

    @property
    def display_type(self) -> str:
        """Property type: ``type``, then ``property_type``, then "string"."""
        return self.type or self.property_type or "string"


class TaxonomyResponse(BaseModel):
    """Envelope shared by the taxonomy endpoints."""

    model_config = ConfigDict(extra="allow")

    success: bool | None = None
    data: list[dict[str, Any]] | None = None


class FunnelData(BaseModel):
    """The ``data`` section of a funnel response."""

    model_config = ConfigDict(extra="allow")

    series: list[int | float] | None = None

    @field_validator("series", mode="before")
    @classmethod
    def numeric_series_only(cls, v: Any) -> Any:
        """Drop ``series`` unless it is a flat list of step counts.

        Grouped funnels nest one series per group; those are returned in
        the raw payload only.
        """
        if not isinstance(v, list):
            return None
        if not all(
            isinstance(x, int | float) and not isinstance(x, bool) for x in v
        ):
            return None
        return v


class FunnelResponse(BaseModel):
    """Funnel response envelope."""

    model_config = ConfigDict(extra="allow")

    data: FunnelData | None = None

    @field_validator("data", mode="before")
    @classmethod
    def object_data_only(cls, v: Any) -> Any:
        """Treat non-object ``data`` sections as absent."""
        return v if isinstance(v, dict) else None


@dataclass(frozen=True)
class FunnelStep:
    """Conversion figures for one funnel step.

    Rates are pre-formatted percentages with one decimal place, or "0"
    when the denominator is zero.

    Attributes:
        step: 1-based step number.
        count: Users reaching this step.
        overall_rate: Conversion from the first step.
        step_rate: Conversion from the previous step (step 1 against itself).
    """

    step: int
    """1-based step number."""

    count: int | float
    """Users reaching this step."""

    overall_rate: str
    """Conversion from the first step, e.g. "50.0"."""

    step_rate: str
    """Conversion from the previous step, e.g. "50.0"."""


# =============================================================================
# Prompt Definition Types
# =============================================================================


class PromptArgumentSpec(BaseModel):
    """One argument of a project prompt."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    description: str = ""
    required: bool = False


class PromptDefinition(BaseModel):
    """Project prompt loaded from a JSON file.

    Example file:
        ```json
        {
          "name": "weekly_kpis",
          "description": "Weekly KPI review",
          "template": "Review {metric} for {team}",
          "arguments": [{"name": "metric", "required": true}]
        }
        ```
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    description: str = ""
    template: str
    arguments: list[PromptArgumentSpec] = Field(default_factory=list)

    @property
    def argument_names(self) -> list[str]:
        """Declared argument names in file order."""
        return [arg.name for arg in self.arguments]


__all__ = [
    "Breakdown",
    "DateString",
    "EventSpec",
    "EventWithFilters",
    "FunnelData",
    "FunnelRequest",
    "FunnelResponse",
    "FunnelStep",
    "PromptArgumentSpec",
    "PromptDefinition",
    "PropertyFilter",
    "PropertyValue",
    "RetentionEvent",
    "RetentionRequest",
    "SegmentCondition",
    "SegmentationRequest",
    "TaxonomyEvent",
    "TaxonomyProperty",
    "TaxonomyResponse",
]
