"""
Tests for the session config, derived views and upload lifecycle.
"""

import dataclasses

import pytest

from team_dashboard import DashboardSession, SessionConfig, compute_views
from team_metrics import Metric
from whoop_csv import EmptyResultError, MalformedInputError, parse_readings


class TestSessionConfig:

    def test_defaults(self):
        config = SessionConfig()
        assert config.athlete == "All"
        assert config.time_range == "all"
        assert config.report_days == 7

    @pytest.mark.parametrize("kwargs", [
        {"time_range": "abc"},
        {"time_range": 0},
        {"report_days": 30},
    ])
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            SessionConfig(**kwargs)

    def test_is_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            SessionConfig().athlete = "Jo Doe"


class TestComputeViews:

    def test_whole_team(self, team_readings):
        views = compute_views(team_readings, SessionConfig())

        assert views.athletes == ["Jo Doe", "Sam Lee"]
        assert views.summary[Metric.RECOVERY].count == 5
        assert len(views.trends) == 3
        assert [r.athlete_id for r in views.rollups] == ["Jo Doe", "Sam Lee"]
        assert [r.athlete_id for r in views.report] == ["Jo Doe", "Sam Lee"]

    def test_athlete_filter_does_not_narrow_report(self, team_readings):
        views = compute_views(team_readings, SessionConfig(athlete="Sam Lee"))

        assert views.summary[Metric.RECOVERY].count == 3
        assert [r.athlete_id for r in views.rollups] == ["Sam Lee"]
        assert len(views.report) == 2
        # the athlete list always reflects the whole export
        assert views.athletes == ["Jo Doe", "Sam Lee"]

    def test_time_range(self, team_readings):
        views = compute_views(team_readings, SessionConfig(time_range="1"))
        assert views.trends["date"].tolist() == ["2024-03-02", "2024-03-03"]
        assert len(views.working) == 4

    def test_recent_trends_tail(self, make_csv):
        rows = [
            {"Date": f"2024-01-{d:02d}", "First Name": "Jo", "Last Name": "Doe", "Recovery": 40 + d}
            for d in range(1, 21)
        ]
        views = compute_views(parse_readings(make_csv(rows)), SessionConfig())

        assert len(views.trends) == 20
        assert len(views.recent_trends) == 14
        assert views.recent_trends["date"].iloc[0] == "2024-01-07"
        assert views.recent_trends["date"].iloc[-1] == "2024-01-20"

    def test_recent_trends_short_export(self, team_readings):
        views = compute_views(team_readings, SessionConfig())
        assert views.recent_trends["date"].tolist() == ["2024-03-01", "2024-03-02", "2024-03-03"]

    def test_unknown_athlete_gives_empty_views(self, team_readings):
        views = compute_views(team_readings, SessionConfig(athlete="Nobody"))
        assert views.summary == {}
        assert views.trends.empty
        assert views.rollups == []

    def test_input_is_not_mutated(self, team_readings):
        before = team_readings.copy()
        compute_views(team_readings, SessionConfig(athlete="Jo Doe", time_range=7))
        assert team_readings.equals(before)


class TestDashboardSession:

    def test_views_require_data(self):
        session = DashboardSession()
        assert not session.has_data
        with pytest.raises(RuntimeError, match="upload"):
            session.views()

    def test_upload_and_select(self, team_csv):
        session = DashboardSession()
        session.upload(team_csv)
        assert session.has_data

        config = session.select_athlete("Jo Doe")
        assert config.athlete == "Jo Doe"
        assert [r.athlete_id for r in session.views().rollups] == ["Jo Doe"]

        session.select_report_days(14)
        assert session.config == SessionConfig(athlete="Jo Doe", report_days=14)

    def test_invalid_selection_keeps_config(self, team_csv):
        session = DashboardSession()
        session.upload(team_csv)
        with pytest.raises(ValueError):
            session.select_time_range("yesterday")
        assert session.config == SessionConfig()

    @pytest.mark.parametrize("bad_text, error", [
        ("", MalformedInputError),
        ("Date,First Name,Last Name\n,,", EmptyResultError),
    ])
    def test_failed_upload_keeps_previous_data(self, team_csv, bad_text, error):
        session = DashboardSession()
        session.upload(team_csv)
        previous = session.readings

        with pytest.raises(error):
            session.upload(bad_text)
        assert session.readings is previous

    def test_reset(self, team_csv):
        session = DashboardSession(SessionConfig(athlete="Jo Doe"))
        session.upload(team_csv)
        session.reset()

        assert not session.has_data
        assert session.config == SessionConfig()
