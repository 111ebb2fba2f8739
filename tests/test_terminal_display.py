"""Tests for departure formatting and terminal rendering."""

import io
import json
from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from tests.test_departure_grouping_service import BASE_TIME, make_departure
from wl_departures.adapters.terminal import (
    DepartureFormatter,
    TerminalDisplayAdapter,
    TerminalProgressReporter,
)
from wl_departures.domain.models import (
    DepartureGroup,
    DepartureLoadResult,
    ErrorDetails,
    LoadProgress,
    LoadStatus,
    Station,
    TransportCategory,
)

STATION = Station("Karlsplatz", "Wien", 48.2003, 16.3695, 4116, (4116, 4117))
RENDER_TIME = datetime(2025, 1, 15, 12, 0, 30)


@pytest.fixture
def formatter() -> DepartureFormatter:
    """Departure formatter."""
    return DepartureFormatter()


class TestDepartureFormatter:
    """Tests for text formatting."""

    @pytest.mark.parametrize(
        ("minutes", "expected"), [(None, "?"), (0, "Jetzt"), (1, "1 Min"), (12, "12 Min")]
    )
    def test_format_countdown(
        self, formatter: DepartureFormatter, minutes: int | None, expected: str
    ) -> None:
        """Given a countdown, when formatting, then the board text results."""
        assert formatter.format_countdown(minutes) == expected

    @pytest.mark.parametrize(("real_offset", "expected"), [(2, "+2"), (-1, "-1"), (0, "±0")])
    def test_format_delay(
        self, formatter: DepartureFormatter, real_offset: int, expected: str
    ) -> None:
        """Given planned and real times, when formatting the delay, then it is signed."""
        real = BASE_TIME + timedelta(minutes=real_offset)

        assert formatter.format_delay(BASE_TIME, real) == expected

    def test_format_delay_rounds_to_minutes(self, formatter: DepartureFormatter) -> None:
        """Given a 40 second delay, when formatting, then it rounds to one minute."""
        assert formatter.format_delay(BASE_TIME, BASE_TIME + timedelta(seconds=40)) == "+1"

    def test_when_only_one_time_has_offset_then_delay_omitted(
        self, formatter: DepartureFormatter
    ) -> None:
        """Given an aware planned and a naive real time, when formatting, then no delay is shown."""
        naive_real = datetime(2025, 1, 15, 12, 5)
        mixed = replace(make_departure(countdown=5, planned_offset=4), real_time=naive_real)

        assert formatter.delay_minutes(BASE_TIME, naive_real) is None
        assert formatter.format_delay(naive_real, BASE_TIME) == ""
        assert formatter.format_times(mixed) == "Plan 12:04 / Ist 12:05"
        assert formatter.format_compact(mixed) == "5 Min (12:05)"

    def test_format_times_distinguishes_planned_only(self, formatter: DepartureFormatter) -> None:
        """Given planned-only and real-time departures, when formatting, then they differ."""
        planned_only = make_departure(planned_offset=4)
        realtime = make_departure(planned_offset=4, real_offset=5)

        assert formatter.format_times(planned_only) == "Plan 12:04"
        assert formatter.format_times(realtime) == "Plan 12:04 / Ist 12:05 (+1)"
        assert formatter.format_times(make_departure()) == ""

    def test_format_compact_marks_schedule_times(self, formatter: DepartureFormatter) -> None:
        """Given departures with and without live data, when formatting compactly, then both read well."""
        assert formatter.format_compact(make_departure(countdown=3, planned_offset=3)) == (
            "3 Min (12:03*)"
        )
        assert (
            formatter.format_compact(make_departure(countdown=0, planned_offset=0, real_offset=0))
            == "Jetzt (12:00 ±0)"
        )
        assert formatter.format_compact(make_departure(countdown=None)) == "?"


class TestTerminalDisplayAdapter:
    """Tests for board rendering."""

    def test_when_loaded_then_groups_rendered(self) -> None:
        """Given loaded groups, when rendering, then one line per group is shown."""
        group = DepartureGroup(
            line="U1",
            destination="OBERLAA",
            platform="1",
            category=TransportCategory.METRO,
            departures=(make_departure(countdown=2), make_departure(countdown=None)),
        )
        result = DepartureLoadResult(
            LoadStatus.LOADED, STATION, (group,), platforms_requested=2, platforms_succeeded=1
        )

        text = TerminalDisplayAdapter().render(result, now=RENDER_TIME)

        lines = text.splitlines()
        assert lines[0] == "Karlsplatz (Wien)  (Stand 12:00:30)"
        assert lines[1] == "1/2 Steige erreichbar"
        assert "U1" in lines[2]
        assert "OBERLAA" in lines[2]
        assert "Steig 1" in lines[2]
        assert lines[2].endswith("2 Min, ?")

    @pytest.mark.parametrize(
        ("status", "message"),
        [
            (LoadStatus.NO_DATA, "Keine Abfahrtsdaten verfügbar"),
            (LoadStatus.NO_DEPARTURES, "Keine Abfahrten gefunden"),
        ],
    )
    def test_when_nothing_to_show_then_message(self, status: LoadStatus, message: str) -> None:
        """Given an empty result, when rendering, then the matching message is shown."""
        text = TerminalDisplayAdapter().render(DepartureLoadResult(status, STATION), RENDER_TIME)

        assert text.splitlines()[-1] == message

    def test_when_failed_then_error_reason_shown(self) -> None:
        """Given a failed load, when rendering, then the reason is shown."""
        result = DepartureLoadResult(
            LoadStatus.FAILED, STATION, error=ErrorDetails(reason="Timeout")
        )

        text = TerminalDisplayAdapter().render(result, RENDER_TIME)

        assert text.splitlines()[-1] == "Fehler beim Laden der Abfahrten: Timeout"

    @pytest.mark.asyncio
    async def test_when_json_then_document_written(self) -> None:
        """Given JSON output, when displaying, then a parseable document is written."""
        stream = io.StringIO()
        group = DepartureGroup(
            line="U4",
            destination="HÜTTELDORF",
            platform="2",
            category=TransportCategory.METRO,
            departures=(make_departure(line="U4", countdown=1, planned_offset=1, real_offset=1),),
        )
        adapter = TerminalDisplayAdapter(stream=stream, as_json=True)

        await adapter.display_result(DepartureLoadResult(LoadStatus.LOADED, STATION, (group,)))

        document = json.loads(stream.getvalue())
        assert document["status"] == "loaded"
        assert document["station"]["rbls"] == [4116, 4117]
        assert document["groups"][0]["badge"] == "metro u4"
        assert document["groups"][0]["departures"][0]["realtime"] is True
        assert document["groups"][0]["departures"][0]["countdown_text"] == "1 Min"


def test_progress_reporter_writes_counts() -> None:
    """Given a progress update, when reporting, then counts are written."""
    stream = io.StringIO()

    TerminalProgressReporter(stream).report(LoadProgress(5, 12, 4, 1, 3))

    assert stream.getvalue() == "5/12 RBLs (4 erfolgreich)\n"
