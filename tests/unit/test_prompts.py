"""Unit tests for built-in and project prompts."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

import pytest
from fastmcp import Client, FastMCP
from fastmcp.exceptions import PromptError

from amplitude_mcp.prompts import (
    ProjectPrompt,
    analyze_user_journey,
    conversion_funnel,
    engagement_report,
    format_date_range,
    load_prompt_definitions,
    register_project_prompts,
    render_template,
    retention_analysis,
)
from amplitude_mcp.types import PromptDefinition

PLACEHOLDER = re.compile(r"\{[A-Za-z_][A-Za-z0-9_]*\}")
SERVER_TOOLS = {
    "list_events",
    "list_event_properties",
    "list_user_properties",
    "query_events",
    "segment_events",
    "analyze_funnel",
    "analyze_retention",
}


def _write_prompt(directory: Path, filename: str, content: object) -> None:
    prompts_dir = directory / "prompts"
    prompts_dir.mkdir(exist_ok=True)
    text = content if isinstance(content, str) else json.dumps(content)
    (prompts_dir / filename).write_text(text, encoding="utf-8")


class TestFormatDateRange:
    """Tests for format_date_range()."""

    @pytest.mark.parametrize(
        ("time_range", "description"),
        [
            ("last_7_days", "last 7 days"),
            ("last_30_days", "last 30 days"),
            ("last_90_days", "last 90 days"),
            ("last_year", "last 30 days"),
        ],
    )
    def test_ranges(self, time_range: str, description: str) -> None:
        """Known ranges map to their window; unknown ones default to 30 days."""
        start, end, text = format_date_range(time_range)
        assert text == description
        assert re.fullmatch(r"\d{8}", start)
        assert start < end


class TestBuiltinPrompts:
    """Tests for the four built-in prompts."""

    def test_registered(self, registered_prompt_names: list[str]) -> None:
        """All four prompts should be registered."""
        assert {
            "analyze_user_journey",
            "conversion_funnel",
            "engagement_report",
            "retention_analysis",
        } <= set(registered_prompt_names)

    def test_conversion_funnel(self) -> None:
        """The funnel prompt should spell out the analyze_funnel call."""
        start, end, _ = format_date_range("last_7_days")
        text = conversion_funnel("signup", "purchase", "last_7_days")
        assert "analyze_funnel" in text
        assert '{"event_type": "signup"}, {"event_type": "purchase"}' in text
        assert f'start: "{start}"' in text
        assert f'end: "{end}"' in text
        assert "last 7 days" in text

    def test_engagement_report_defaults_to_active(self) -> None:
        """Without an event, the report should cover all active events."""
        text = engagement_report()
        assert "all active events" in text
        assert '"_active"' in text
        assert "last 30 days" in text

    def test_engagement_report_named_event(self) -> None:
        """A named event should be quoted."""
        text = engagement_report("login", "last_90_days")
        assert 'for "login"' in text
        assert "last 90 days" in text

    def test_retention_analysis(self) -> None:
        """The retention prompt should name both events."""
        text = retention_analysis("sign_up", "page_viewed")
        assert '"sign_up"' in text
        assert '"page_viewed"' in text
        assert "analyze_retention" in text

    def test_user_journey(self) -> None:
        """The journey prompt should name the user."""
        assert '"user-42"' in analyze_user_journey("user-42")

    @pytest.mark.parametrize(
        "text",
        [
            analyze_user_journey("u"),
            conversion_funnel("a", "b"),
            engagement_report(),
            retention_analysis("a", "b"),
        ],
    )
    def test_only_existing_tools_referenced(self, text: str) -> None:
        """Prompts should only mention tools this server provides."""
        for word in re.findall(r"\b[a-z]+(?:_[a-z]+)+\b", text):
            if word.startswith(("list_", "query_", "segment_", "analyze_")):
                assert word in SERVER_TOOLS, word


class TestRenderTemplate:
    """Tests for render_template()."""

    def test_replaces_all_occurrences(self) -> None:
        """Every occurrence of a placeholder should be replaced."""
        assert render_template("{a} and {a}", {"a": "x"}, ["a"]) == "x and x"

    def test_missing_argument_is_empty(self) -> None:
        """Declared but missing arguments should render as empty."""
        assert render_template("[{a}]", {}, ["a"]) == "[]"
        assert render_template("[{a}]", {"a": None}, ["a"]) == "[]"

    def test_literal_replacement(self) -> None:
        """Values are inserted literally, even if they look like placeholders."""
        text = render_template("{a} {b}", {"a": "{b}", "b": "B"}, ["a", "b"])
        assert text == "{b} B"
        assert render_template("{a}", {"a": "{a}"}, ["a"]) == "{a}"

    def test_unknown_braces_left_alone(self) -> None:
        """Braces that do not name an argument should not be touched."""
        assert render_template('{"x": 1} {a}', {"a": "v"}, ["a"]) == '{"x": 1} v'

    def test_user_journey_template(self) -> None:
        """A template with user_identifier and time_range renders fully."""
        template = "Analyze {user_identifier} over {time_range}."
        text = render_template(
            template,
            {"user_identifier": "user-1", "time_range": "last_7_days"},
            ["user_identifier", "time_range"],
        )
        assert text == "Analyze user-1 over last_7_days."
        assert not PLACEHOLDER.search(text)


class TestLoadPromptDefinitions:
    """Tests for load_prompt_definitions()."""

    def test_missing_directory(self, tmp_path: Path) -> None:
        """A project without prompts/ should yield nothing."""
        assert load_prompt_definitions(tmp_path) == []

    def test_loads_json_files_in_order(self, tmp_path: Path) -> None:
        """Valid files should load in file-name order; other files are ignored."""
        _write_prompt(tmp_path, "b.json", {"name": "second", "template": "t"})
        _write_prompt(tmp_path, "a.json", {"name": "first", "template": "t"})
        _write_prompt(tmp_path, "notes.txt", "not a prompt")

        names = [d.name for d in load_prompt_definitions(tmp_path)]
        assert names == ["first", "second"]

    def test_invalid_files_skipped(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Broken JSON and invalid definitions should be logged and skipped."""
        _write_prompt(tmp_path, "broken.json", "{not json")
        _write_prompt(tmp_path, "invalid.json", {"name": "no_template"})
        _write_prompt(tmp_path, "ok.json", {"name": "ok", "template": "t"})

        with caplog.at_level(logging.WARNING, logger="amplitude_mcp.prompts"):
            definitions = load_prompt_definitions(tmp_path)

        assert [d.name for d in definitions] == ["ok"]
        assert "broken.json" in caplog.text
        assert "invalid.json" in caplog.text


class TestProjectPrompts:
    """Tests for project prompt registration."""

    def test_declared_arguments(self) -> None:
        """The prompt should advertise the declared arguments in order."""
        definition = PromptDefinition.model_validate(
            {
                "name": "kpis",
                "description": "KPI review",
                "template": "{metric}/{team}",
                "arguments": [
                    {"name": "metric", "description": "Metric", "required": True},
                    {"name": "team"},
                ],
            }
        )
        prompt = ProjectPrompt.from_definition(definition)
        assert prompt.name == "kpis"
        assert prompt.description == "KPI review"
        assert [(a.name, a.required) for a in prompt.arguments or []] == [
            ("metric", True),
            ("team", False),
        ]

    @pytest.mark.asyncio
    async def test_render_missing_optional(self) -> None:
        """Optional arguments that are not supplied render as empty."""
        definition = PromptDefinition.model_validate(
            {
                "name": "kpis",
                "template": "{metric}/{team}",
                "arguments": [{"name": "metric", "required": True}, {"name": "team"}],
            }
        )
        prompt = ProjectPrompt.from_definition(definition)
        assert await prompt.render({"metric": "dau"}) == "dau/"

    @pytest.mark.asyncio
    async def test_render_missing_required(self) -> None:
        """A missing required argument should be reported by name."""
        definition = PromptDefinition.model_validate(
            {
                "name": "kpis",
                "template": "{metric}",
                "arguments": [{"name": "metric", "required": True}],
            }
        )
        prompt = ProjectPrompt.from_definition(definition)
        with pytest.raises(PromptError, match="metric"):
            await prompt.render({})

    @pytest.mark.asyncio
    async def test_keyword_and_hyphenated_names(self, tmp_path: Path) -> None:
        """Argument names need not be Python identifiers."""
        _write_prompt(
            tmp_path,
            "a_range.json",
            {
                "name": "date_window",
                "template": "Events {from} to {to} for {user-id}",
                "arguments": [
                    {"name": "from", "required": True},
                    {"name": "to"},
                    {"name": "user-id", "required": True},
                ],
            },
        )
        _write_prompt(tmp_path, "b_plain.json", {"name": "plain", "template": "t"})
        server = FastMCP(name="test")

        assert register_project_prompts(server, tmp_path) == ["date_window", "plain"]

        async with Client(server) as client:
            prompts = {p.name: p for p in await client.list_prompts()}
            assert [a.name for a in prompts["date_window"].arguments or []] == [
                "from",
                "to",
                "user-id",
            ]
            result = await client.get_prompt(
                "date_window", {"from": "20240101", "user-id": "u-1"}
            )

        text = result.messages[0].content.text
        assert text == "Events 20240101 to  for u-1"

    def test_none_project_dir(self) -> None:
        """No project directory should register nothing."""
        assert register_project_prompts(FastMCP(name="t"), None) == []

    @pytest.mark.asyncio
    async def test_round_trip(self, tmp_path: Path) -> None:
        """A registered project prompt should render through the MCP client."""
        _write_prompt(
            tmp_path,
            "journey.json",
            {
                "name": "team_journey",
                "description": "Journey for one user",
                "template": "Analyze {user_identifier} over {time_range}. Notes: {notes}",
                "arguments": [
                    {"name": "user_identifier", "required": True},
                    {"name": "time_range", "required": True},
                    {"name": "notes"},
                ],
            },
        )
        server = FastMCP(name="test")
        assert register_project_prompts(server, tmp_path) == ["team_journey"]

        async with Client(server) as client:
            prompts = {p.name: p for p in await client.list_prompts()}
            assert prompts["team_journey"].description == "Journey for one user"
            result = await client.get_prompt(
                "team_journey",
                {"user_identifier": "user-7", "time_range": "last_7_days"},
            )

        text = result.messages[0].content.text
        assert text == "Analyze user-7 over last_7_days. Notes: "
        assert not PLACEHOLDER.search(text)
