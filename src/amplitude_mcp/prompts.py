"""MCP prompts for guided Amplitude analysis.

Four built-in prompts walk an agent through common analyses using this
server's tools. Projects can add their own prompts as JSON files in
``{project_dir}/prompts/``; see ``load_prompt_definitions``.

Example:
    User requests the "conversion_funnel" prompt with start_event="signup"
    and end_event="purchase", and gets the exact analyze_funnel call to make
    plus what to look for in the result.
"""

import json
import logging
import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Literal

from fastmcp import FastMCP
from fastmcp.exceptions import PromptError
from fastmcp.prompts import Prompt, PromptArgument

from amplitude_mcp._literal_types import TimeRange
from amplitude_mcp.formatters import last_n_days
from amplitude_mcp.server import mcp
from amplitude_mcp.types import PromptDefinition

logger = logging.getLogger(__name__)

TIME_RANGE_DAYS: dict[str, int] = {
    "last_7_days": 7,
    "last_30_days": 30,
    "last_90_days": 90,
}

DEFAULT_TIME_RANGE = "last_30_days"


def format_date_range(time_range: str) -> tuple[str, str, str]:
    """Resolve a relative time range to concrete dates.

    Args:
        time_range: One of last_7_days, last_30_days, last_90_days.
            Anything else is treated as last_30_days.

    Returns:
        Tuple of (start, end, description), dates as YYYYMMDD.
    """
    if time_range not in TIME_RANGE_DAYS:
        time_range = DEFAULT_TIME_RANGE
    start, end = last_n_days(TIME_RANGE_DAYS[time_range])
    return start, end, time_range.replace("_", " ")


# =============================================================================
# Built-in prompts
# =============================================================================


@mcp.prompt()
def analyze_user_journey(
    user_identifier: str,
    time_range: TimeRange = "last_30_days",
) -> str:
    """Analyze a specific user's event history and behavior patterns.

    Args:
        user_identifier: User ID, device ID, or Amplitude ID to analyze.
        time_range: Time range for analysis.
    """
    start, end, description = format_date_range(time_range)
    return f"""Analyze the journey for user "{user_identifier}" over the {description}.

Steps:
1. Use list_events to find the events this project tracks
2. Use list_user_properties to find the property that identifies users
3. Use segment_events for the key events with:
   - start: "{start}"
   - end: "{end}"
   - a property filter matching "{user_identifier}"
4. Identify key patterns:
   - Most frequent events
   - Session patterns
   - Any conversion events
   - Drop-off points
5. Provide insights and recommendations"""


@mcp.prompt()
def conversion_funnel(
    start_event: str,
    end_event: str,
    time_range: TimeRange = "last_30_days",
) -> str:
    """Analyze conversion rates through a sequence of events.

    Args:
        start_event: The starting event of the funnel (e.g., 'page_viewed').
        end_event: The goal/conversion event (e.g., 'purchase_completed').
        time_range: Time range.
    """
    start, end, description = format_date_range(time_range)
    return f"""Analyze the conversion funnel from "{start_event}" to "{end_event}" over the {description}.

Use the analyze_funnel tool with:
- events: [{{"event_type": "{start_event}"}}, {{"event_type": "{end_event}"}}]
- start: "{start}"
- end: "{end}"

Then analyze:
1. Overall conversion rate
2. Drop-off between steps
3. Suggestions for improving conversion"""


@mcp.prompt()
def engagement_report(
    event_type: str | None = None,
    time_range: TimeRange = "last_30_days",
) -> str:
    """Generate a comprehensive engagement report for key events.

    Args:
        event_type: Specific event to analyze (leave empty for all active events).
        time_range: Time range.
    """
    start, end, description = format_date_range(time_range)
    subject = f'"{event_type}"' if event_type else "all active events"
    event_name = event_type or "_active"
    return f"""Generate an engagement report for {subject} over the {description}.

Steps:
1. Query event data using query_events with:
   - events: [{{"event_type": "{event_name}"}}]
   - start: "{start}"
   - end: "{end}"
   - interval: "day"

2. Repeat with interval "week" to see the weekly shape

3. Analyze and report:
   - Total event count and trend
   - Daily/weekly patterns
   - Peak usage days
   - Comparison to previous period
   - Key insights and recommendations"""


@mcp.prompt()
def retention_analysis(
    start_event: str,
    return_event: str,
    time_range: Literal["last_30_days", "last_90_days"] = "last_30_days",
) -> str:
    """Analyze user retention between two events.

    Args:
        start_event: Event that defines user acquisition (e.g., 'sign_up').
        return_event: Event that indicates user return (e.g., 'page_viewed').
        time_range: Time range.
    """
    start, end, description = format_date_range(time_range)
    return f"""Analyze user retention from "{start_event}" to "{return_event}" over the {description}.

Use the analyze_retention tool with:
- start_event: {{"event_type": "{start_event}"}}
- return_event: {{"event_type": "{return_event}"}}
- start: "{start}"
- end: "{end}"

Analyze:
1. Day 1, Day 7, Day 30 retention rates
2. Retention curve shape
3. Comparison to industry benchmarks
4. Recommendations for improving retention"""


# =============================================================================
# Project prompts
# =============================================================================


def render_template(
    template: str,
    arguments: Mapping[str, str | None],
    names: Sequence[str] = (),
) -> str:
    """Substitute ``{name}`` placeholders in a project prompt template.

    Substitution is a single literal pass: values are inserted as-is and are
    never expanded again, and braces that do not name an argument are left
    alone. Declared arguments that were not supplied render as the empty
    string.

    Args:
        template: Template text.
        arguments: Supplied argument values.
        names: Declared argument names.

    Returns:
        The rendered text.

    Example:
        ```python
        render_template("Hi {user}", {}, ["user"])
        # "Hi "
        ```
    """
    known = list(dict.fromkeys([*names, *arguments]))
    if not known:
        return template

    def value_for(match: re.Match[str]) -> str:
        value = arguments.get(match[1])
        return "" if value is None else str(value)

    pattern = r"\{(" + "|".join(map(re.escape, known)) + r")\}"
    return re.sub(pattern, value_for, template)


class ProjectPrompt(Prompt):
    """A prompt rendered from a project template file.

    Arguments are declared explicitly, so any non-empty string is a valid
    argument name, including ``user-id`` or ``from``.
    """

    template: str

    @classmethod
    def from_definition(cls, definition: PromptDefinition) -> "ProjectPrompt":
        """Build the prompt for a validated definition."""
        return cls(
            name=definition.name,
            description=definition.description or None,
            template=definition.template,
            arguments=[
                PromptArgument(
                    name=arg.name,
                    description=arg.description or None,
                    required=arg.required,
                )
                for arg in definition.arguments
            ],
        )

    async def render(self, arguments: dict[str, Any] | None = None) -> str:
        """Render the template with the supplied arguments.

        Raises:
            PromptError: If a required argument is missing.
        """
        supplied = arguments or {}
        declared = self.arguments or []
        missing = [
            arg.name for arg in declared if arg.required and arg.name not in supplied
        ]
        if missing:
            raise PromptError(f"Missing required arguments: {', '.join(missing)}")
        return render_template(self.template, supplied, [arg.name for arg in declared])


def load_prompt_definitions(project_dir: Path) -> list[PromptDefinition]:
    """Read every ``*.json`` prompt definition in ``{project_dir}/prompts``.

    Files that cannot be read or do not validate are logged and skipped.

    Args:
        project_dir: Project directory.

    Returns:
        Definitions in file-name order; empty when the directory is absent.
    """
    prompts_dir = project_dir / "prompts"
    if not prompts_dir.is_dir():
        logger.debug("No prompts directory at %s", prompts_dir)
        return []

    definitions: list[PromptDefinition] = []
    for path in sorted(prompts_dir.glob("*.json")):
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            definitions.append(PromptDefinition.model_validate(raw))
        except (OSError, ValueError) as e:
            logger.warning("Failed to load prompt from %s: %s", path.name, e)
    return definitions


def register_project_prompts(server: FastMCP, project_dir: Path | None) -> list[str]:
    """Register the project's prompt definitions with the server.

    A definition that cannot be turned into a prompt is logged and skipped;
    the others are still registered.

    Args:
        server: Server to register with.
        project_dir: Project directory, or None to register nothing.

    Returns:
        Names of the prompts that were registered.
    """
    if project_dir is None:
        return []

    registered: list[str] = []
    for definition in load_prompt_definitions(project_dir):
        try:
            server.add_prompt(ProjectPrompt.from_definition(definition))
        except ValueError as e:
            logger.warning("Failed to register prompt %s: %s", definition.name, e)
            continue
        registered.append(definition.name)

    if registered:
        logger.info("Registered %d project prompts: %s", len(registered), registered)
    return registered
