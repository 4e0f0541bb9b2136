"""Dossier analyzer: loads a blueprint and runs the calculation graph."""

import json
import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from pydantic import ValidationError

from box3_validator.config import Settings, settings
from box3_validator.graph import create_analysis_graph
from box3_validator.schemas.blueprint import Box3Blueprint, ManualOverride
from box3_validator.schemas.results import CalculationPolicy, DossierAnalysis, RefundSummary
from box3_validator.tools.overrides import apply_manual_overrides
from box3_validator.tools.rates import RateTables, load_rate_tables

logger = logging.getLogger(__name__)


class BlueprintError(ValueError):
    """Raised when a blueprint cannot be loaded or does not match the schema."""

    pass


def read_json(path: Path) -> Union[dict, list]:
    """Read a JSON file, raising BlueprintError on a missing or malformed file."""
    if not path.exists():
        raise BlueprintError(f"File not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise BlueprintError(f"Invalid JSON in {path}: {e}") from e


def load_blueprint(source: Union[Path, str, dict, Box3Blueprint]) -> Box3Blueprint:
    """Load a blueprint from a file path, a dict or a model.

    A file may hold the blueprint itself or a stored blueprint record with
    the blueprint under a ``blueprint`` key.

    Raises:
        BlueprintError: If the file is missing, not JSON, or not a blueprint
    """
    if isinstance(source, Box3Blueprint):
        return source

    if isinstance(source, (str, Path)):
        data = read_json(Path(source))
    else:
        data = source

    if not isinstance(data, dict):
        raise BlueprintError(f"Blueprint must be a JSON object, got {type(data).__name__}")
    if isinstance(data.get("blueprint"), dict):
        data = data["blueprint"]

    try:
        return Box3Blueprint.model_validate(data)
    except ValidationError as e:
        raise BlueprintError(f"Blueprint does not match the schema: {e}") from e


def load_overrides(path: Union[Path, str]) -> list[ManualOverride]:
    """Load manual overrides from a JSON file (a list, or ``{"overrides": [...]}``).

    Raises:
        BlueprintError: If the file is missing or malformed
    """
    data = read_json(Path(path))
    if isinstance(data, dict):
        data = data.get("overrides", data.get("manual_overrides", []))
    if not isinstance(data, list):
        raise BlueprintError("Overrides file must contain a list of overrides")
    try:
        return [ManualOverride.model_validate(item) for item in data]
    except ValidationError as e:
        raise BlueprintError(f"Invalid override: {e}") from e


class Box3Analyzer:
    """Runs the Box 3 refund calculation for one dossier."""

    def __init__(
        self,
        app_settings: Optional[Settings] = None,
        rates: Optional[RateTables] = None,
    ) -> None:
        """Initialize the analyzer.

        Args:
            app_settings: Settings to derive the calculation policy from
            rates: Rate tables (default: the bundled tables)
        """
        self.settings = app_settings or settings
        self.policy = CalculationPolicy.from_settings(self.settings)
        self.rates = rates or load_rate_tables(self.settings.data_dir)
        self.graph = create_analysis_graph()

    def analyze(
        self,
        blueprint: Union[Path, str, dict, Box3Blueprint],
        overrides: Optional[Iterable[Union[ManualOverride, dict]]] = None,
    ) -> DossierAnalysis:
        """Analyze a dossier.

        Manual overrides (those stored in the blueprint and the ones given
        here) are merged before the calculation runs.

        Args:
            blueprint: Blueprint path, dict or model
            overrides: Additional manual overrides

        Returns:
            DossierAnalysis with per-year, per-person and household results

        Raises:
            BlueprintError: If the blueprint cannot be loaded
        """
        loaded = load_blueprint(blueprint)
        try:
            merged = apply_manual_overrides(loaded, overrides)
        except ValidationError as e:
            raise BlueprintError(f"Manual overrides produce an invalid blueprint: {e}") from e

        result = self.graph.invoke(
            {"blueprint": merged, "policy": self.policy, "rates": self.rates}
        )

        years = result.get("years") or {}
        total_tax_assessed = sum(
            year.tax_assessed for year in years.values() if year.tax_assessed
        )
        return DossierAnalysis(
            years=years,
            persons=result.get("persons") or [],
            refund=result.get("refund") or RefundSummary(),
            next_step=result["next_step"],
            has_partner=merged.has_partner,
            total_tax_assessed=total_tax_assessed,
        )
