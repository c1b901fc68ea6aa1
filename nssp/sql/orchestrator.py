"""
NSSP SQL Orchestrator

Orchestrators are plumbing:
  - Loads observations into the base table
  - Runs all SQL stages in order
  - Queries views by name
  - Exports views to parquet/csv for the dashboard

All aggregation and ranking logic lives in the SQL files.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import duckdb
import polars as pl

from nssp.config.schema import NsspConfig, SourceConfig
from nssp.exceptions import UnknownViewError
from nssp.ingest import load_observations, normalize, read_source
from .stages import (
    LoadStage,
    SanityStage,
    GrainStage,
    PeriodStage,
    RankingStage,
    CompositionStage,
    EdaStage,
    select_view,
)

logger = logging.getLogger(__name__)


# Stage execution order
STAGES = [
    ('load', LoadStage),
    ('sanity', SanityStage),
    ('grain', GrainStage),
    ('period', PeriodStage),
    ('ranking', RankingStage),
    ('composition', CompositionStage),
    ('eda', EdaStage),
]

# Stages whose views are not dashboard outputs
NON_EXPORT_STAGES = {'load', 'sanity'}


class SQLOrchestrator:
    """
    Main SQL pipeline orchestrator.

    PLUMBING ONLY:
      - load_observations()  : Materialize the base table
      - run_stage()          : Execute a single stage
      - run_all()            : Execute all stages in order
      - query()              : Query any registered view by name
      - export()             : Write views to parquet/csv
    """

    def __init__(self, db_path: str = ':memory:', read_only: bool = False):
        """
        Initialize orchestrator.

        Args:
            db_path: DuckDB database path (':memory:' for in-memory)
            read_only: Open an existing database without modifying it
        """
        self.db_path = db_path
        self.conn = duckdb.connect(db_path, read_only=read_only)
        self._stages: Dict[str, Any] = {}
        self._output_dir: Optional[Path] = None

        for name, stage_class in STAGES:
            self._stages[name] = stage_class(self.conn)

    def close(self) -> None:
        self.conn.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # ═══════════════════════════════════════════════════════════════════════
    # LOAD: Import data
    # ═══════════════════════════════════════════════════════════════════════

    def load_observations(self, source: Union[pl.DataFrame, str, Path]) -> int:
        """
        Load observations into the base table.

        Args:
            source: Normalized observations frame, or a path to an extract
                    read with the default SourceConfig

        Returns:
            Number of rows loaded
        """
        if isinstance(source, pl.DataFrame):
            observations = source
        else:
            observations = normalize(read_source(source, SourceConfig()))

        load_stage = self._stages['load']
        load_stage.load_observations(observations)
        return load_stage.get_row_count()

    # ═══════════════════════════════════════════════════════════════════════
    # RUN: Execute stages in sequence
    # ═══════════════════════════════════════════════════════════════════════

    def run_stage(self, stage_name: str) -> None:
        """
        Run a single stage.

        Args:
            stage_name: One of the stage names (load, sanity, grain, ...)
        """
        if stage_name not in self._stages:
            raise ValueError(f"Unknown stage: {stage_name}")
        self._stages[stage_name].run()

    def run_all(self, stop_after: Optional[str] = None) -> List[str]:
        """
        Run all stages in order.

        Args:
            stop_after: Optional stage name to stop after

        Returns:
            List of stages executed
        """
        if stop_after is not None and stop_after not in self._stages:
            raise ValueError(f"Unknown stage: {stop_after}")

        executed = []
        for name, _ in STAGES:
            logger.info(f"Stage {name}")
            self.run_stage(name)
            executed.append(name)
            if name == stop_after:
                break
        return executed

    # ═══════════════════════════════════════════════════════════════════════
    # QUERY: Read views by name
    # ═══════════════════════════════════════════════════════════════════════

    def view_names(self, include_sanity: bool = True) -> List[str]:
        """All registered views, in stage order."""
        names = []
        for name, stage in self._stages.items():
            if not include_sanity and name in NON_EXPORT_STAGES:
                continue
            names.extend(stage.get_views())
        return names

    def stage_for_view(self, view_name: str):
        """Stage orchestrator that defines `view_name`."""
        for stage in self._stages.values():
            if view_name in stage.VIEWS:
                return stage
        raise UnknownViewError(f"Unknown view: {view_name}")

    def query(
        self,
        view_name: str,
        pathogen: Optional[str] = None,
        state: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> pl.DataFrame:
        """
        Query a view by name.

        Args:
            view_name: Name of a registered view
            pathogen: Keep rows for this pathogen only
            state: Keep rows for this state only
            limit: Maximum number of rows

        Returns:
            DataFrame ordered by all columns
        """
        self.stage_for_view(view_name)
        return select_view(self.conn, view_name, pathogen=pathogen, state=state, limit=limit)

    def get_stage(self, stage_name: str):
        """Get a stage orchestrator for direct access."""
        return self._stages.get(stage_name)

    def get_summary(self) -> dict:
        """Dataset summary (row count, date range, cardinalities)."""
        return self._stages['sanity'].get_summary()

    def get_duplicate_keys(self) -> pl.DataFrame:
        return self.query('v_duplicate_keys')

    # ═══════════════════════════════════════════════════════════════════════
    # EXPORT: Write views to files
    # ═══════════════════════════════════════════════════════════════════════

    def set_output_dir(self, path: Union[str, Path]) -> None:
        """Set output directory for exports."""
        self._output_dir = Path(path)
        self._output_dir.mkdir(parents=True, exist_ok=True)

    def export(self, view_name: str, fmt: str = 'parquet', filename: Optional[str] = None) -> Path:
        """
        Export a view.

        Args:
            view_name: Registered view to export
            fmt: 'parquet' or 'csv'
            filename: Output filename (default: {view_name}.{fmt})

        Returns:
            Path to exported file
        """
        if self._output_dir is None:
            raise RuntimeError("Output directory not set. Call set_output_dir() first.")
        if fmt not in ('parquet', 'csv'):
            raise ValueError(f"Unknown export format: {fmt}")
        self.stage_for_view(view_name)

        output_path = self._output_dir / (filename or f"{view_name}.{fmt}")
        target = str(output_path).replace("'", "''")
        options = "FORMAT PARQUET" if fmt == 'parquet' else "FORMAT CSV, HEADER"
        self.conn.execute(f"COPY (SELECT * FROM {view_name} ORDER BY ALL) TO '{target}' ({options})")
        logger.info(f"Exported {view_name} -> {output_path}")
        return output_path

    def export_all(self, views: Optional[List[str]] = None, fmt: str = 'parquet') -> Dict[str, Path]:
        """
        Export dashboard views.

        Args:
            views: Views to export (default: every view of the stages that
                   ran, outside load/sanity)
            fmt: 'parquet' or 'csv'

        Returns:
            Dict mapping view name to path
        """
        if views is None:
            views = [
                view
                for name, stage in self._stages.items()
                if name not in NON_EXPORT_STAGES and stage._loaded
                for view in stage.get_views()
            ]
        return {view: self.export(view, fmt) for view in views}

    def write_manifest(self, paths: Dict[str, Path]) -> Path:
        """Write manifest.json with run metadata and exported row counts."""
        if self._output_dir is None:
            raise RuntimeError("Output directory not set.")

        manifest = {
            'generated_at': datetime.now().isoformat(),
            'database': self.db_path,
            'stages_executed': [name for name, stage in self._stages.items() if stage._loaded],
            'summary': {},
            'files': {},
        }

        if self._stages['sanity']._loaded:
            manifest['summary'] = {k: str(v) for k, v in self.get_summary().items()}

        for view, path in paths.items():
            row_count = self.conn.execute(f"SELECT COUNT(*) FROM {view}").fetchone()[0]
            manifest['files'][path.name] = {
                'view': view,
                'rows': row_count,
                'path': str(path),
            }

        manifest_path = self._output_dir / 'manifest.json'
        manifest_path.write_text(json.dumps(manifest, indent=2))
        return manifest_path

    # ═══════════════════════════════════════════════════════════════════════
    # VALIDATION
    # ═══════════════════════════════════════════════════════════════════════

    def validate_stage(self, stage_name: str) -> bool:
        """Check if a stage's views are all queryable."""
        return self._stages[stage_name].validate()

    def validate_all(self) -> Dict[str, bool]:
        """Validate all stages."""
        return {name: stage.validate() for name, stage in self._stages.items()}

    # ═══════════════════════════════════════════════════════════════════════
    # PIPELINE: Full run sequence
    # ═══════════════════════════════════════════════════════════════════════

    def run_pipeline(self, config: NsspConfig) -> Dict[str, Any]:
        """
        Run full pipeline: ingest, build views, export.

        Args:
            config: Run configuration

        Returns:
            Dict with run results
        """
        observations = load_observations(config)
        n_rows = self.load_observations(observations)

        executed = self.run_all(stop_after=config.stop_after)

        if self._stages['sanity']._loaded:
            n_duplicates = self.get_duplicate_keys().height
            if n_duplicates:
                logger.warning(f"{n_duplicates} (date, pathogen, geography) keys reported more than once")

        paths: Dict[str, Path] = {}
        manifest_path = None
        if config.export.output_dir:
            self.set_output_dir(config.export.output_dir)
            paths = self.export_all(config.export.views, config.export.format)
            manifest_path = self.write_manifest(paths)
            logger.info(f"Exported {len(paths)} views to {config.export.output_dir}")

        return {
            'status': 'complete',
            'input_rows': n_rows,
            'stages': executed,
            'database': self.db_path,
            'files': [str(p) for p in paths.values()],
            'manifest': str(manifest_path) if manifest_path else None,
        }
