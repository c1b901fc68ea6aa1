"""
Tests for the command line and the HTTP read API.

Validates:
    1. `run` builds a database file and exports every dashboard view
    2. summary / query / reconcile over a CSV extract
    3. API endpoints, filters and error codes over a built database
"""

import inspect
import json

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from nssp.cli import main
from nssp.config import NsspConfig, SourceConfig
from nssp.server.routes import create_app

CSV_TEXT = """reg,nssp_date,pathogen,geography,percent_visits,other_visits
r1,01-12-23,RSV,Alaska,5.0,95.0
r2,01-12-23,RSV,Texas,7.0,93.0
r3,01-12-23,COVID,Alaska,2.0,98.0
r4,01-12-23,COVID,Texas,3.0,97.0
r5,02-12-23,RSV,Alaska,1.0,99.0
r6,02-12-23,RSV,Texas,2.0,98.0
r7,02-12-23,COVID,Alaska,4.0,96.0
r8,02-12-23,COVID,Texas,6.0,94.0
"""


@pytest.fixture
def extract(tmp_path):
    path = tmp_path / "nssp.csv"
    path.write_text(CSV_TEXT)
    return path


@pytest.fixture
def built(tmp_path, extract):
    """Config file plus a database and exports built by `nssp run`."""
    config = NsspConfig(source=SourceConfig(path=str(extract)), database=str(tmp_path / "nssp.duckdb"))
    config.export.output_dir = str(tmp_path / "out")
    config_path = tmp_path / "nssp.yaml"
    config.to_yaml(config_path)
    assert main(["-q", "run", str(config_path)]) == 0
    return config


# ─────────────────────────────────────────────────────────────────────
# CLI
# ─────────────────────────────────────────────────────────────────────

class TestCli:

    def test_run_exports_and_manifest(self, built, tmp_path):
        out = tmp_path / "out"
        assert (tmp_path / "nssp.duckdb").exists()
        assert (out / "v_top_pathogen_daily_national.parquet").exists()
        manifest = json.loads((out / "manifest.json").read_text())
        assert manifest["files"]["v_daily_pathogen_national.parquet"]["rows"] == 4

    def test_summary(self, extract, capsys):
        assert main(["-q", "summary", str(extract)]) == 0
        out = capsys.readouterr().out
        assert "n_rows" in out
        assert "8" in out

    def test_query_csv(self, extract, capsys):
        code = main(["-q", "query", str(extract), "v_top_pathogen_daily_national", "--csv"])
        assert code == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert lines[0] == "nssp_date,pathogen,nat_prevalence,top_state,top_state_prevalence"
        assert lines[1].startswith("2023-12-01,RSV,6.0,Texas,7.0")
        assert lines[2].startswith("2023-12-02,COVID,5.0,Texas,6.0")

    def test_query_database(self, built, capsys):
        code = main(["-q", "query", "--database", built.database, "v_state_yearly_rank",
                     "--pathogen", "RSV", "--csv"])
        assert code == 0
        assert "Texas" in capsys.readouterr().out

    def test_query_unknown_view(self, extract, capsys):
        assert main(["-q", "query", str(extract), "v_nope"]) == 1
        assert "ERROR" in capsys.readouterr().out

    def test_reconcile(self, extract, capsys):
        assert main(["-q", "reconcile", str(extract)]) == 0
        assert "MISMATCH" not in capsys.readouterr().out

    def test_bad_dates(self, tmp_path, capsys):
        path = tmp_path / "bad.csv"
        path.write_text(CSV_TEXT + "r9,2023-12-03,RSV,Texas,1.0,99.0\n")
        assert main(["-q", "summary", str(path)]) == 1
        assert "r9" in capsys.readouterr().out
        assert main(["-q", "summary", str(path), "--drop-bad-dates"]) == 0

    def test_views(self, capsys):
        assert main(["views"]) == 0
        assert "v_state_burden_rank_daily" in capsys.readouterr().out


# ─────────────────────────────────────────────────────────────────────
# HTTP API
# ─────────────────────────────────────────────────────────────────────

class TestApi:

    @pytest.fixture
    def client(self, built):
        app = create_app(built.database)
        with TestClient(app) as client:
            yield client
        if app.state.orchestrator is not None:
            app.state.orchestrator.close()

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "ok"

    def test_views(self, client):
        views = client.get("/views").json()
        assert "v_top_pathogen_daily_national" in views["composition"]
        assert "load" not in views

    def test_summary(self, client):
        summary = client.get("/summary").json()
        assert summary["n_rows"] == 8
        assert summary["min_date"] == "2023-12-01"

    def test_read_view_with_filters(self, client):
        body = client.get(
            "/views/v_state_burden_rank_daily",
            params={"pathogen": "COVID", "state": "Texas"},
        ).json()
        assert body["rows"] == 2
        assert [r["rnk_high"] for r in body["data"]] == [1, 1]

    def test_limit(self, client):
        body = client.get("/views/v_daily_state_pathogen", params={"limit": 3}).json()
        assert body["rows"] == 3

    def test_unknown_view(self, client):
        assert client.get("/views/observations").status_code == 404

    def test_bad_filter(self, client):
        assert client.get("/views/v_dataset_summary", params={"state": "Texas"}).status_code == 400

    def test_database_routes_run_in_threadpool(self, built):
        app = create_app(built.database)
        endpoints = {r.path: r.endpoint for r in app.routes if isinstance(r, APIRoute)}
        assert not inspect.iscoroutinefunction(endpoints["/summary"])
        assert not inspect.iscoroutinefunction(endpoints["/views/{view_name}"])

    def test_missing_database(self, tmp_path):
        app = create_app(str(tmp_path / "absent.duckdb"))
        with TestClient(app) as client:
            assert client.get("/summary").status_code == 503
