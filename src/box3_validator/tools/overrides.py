"""Merging manual overrides into a blueprint before recomputation."""

import logging
from typing import Any, Iterable, Optional, Union

from box3_validator.schemas.blueprint import Box3Blueprint, ManualOverride
from box3_validator.tools.amounts import parse_amount_string

logger = logging.getLogger(__name__)


class OverridePathError(KeyError):
    """Raised when an override path does not resolve inside the blueprint."""

    pass


def _coerce_value(value: Any, existing: Any = None) -> Any:
    """Turn numeric strings ("1.234,56") into floats, keep other text.

    A field that already holds text keeps the string as given.
    """
    if isinstance(value, str) and not isinstance(existing, str):
        try:
            return parse_amount_string(value)
        except ValueError:
            return value
    return value


def _step(container: Any, segment: str, create: bool) -> Any:
    """Descend one path segment.

    List segments match an element ``id`` first, then a numeric index.
    Missing dict keys are created when ``create`` is set.
    """
    if isinstance(container, dict):
        if segment not in container or container[segment] is None:
            if not create:
                raise OverridePathError(segment)
            container[segment] = {}
        return container[segment]

    if isinstance(container, list):
        for element in container:
            if isinstance(element, dict) and str(element.get("id")) == segment:
                return element
        if segment.isdigit() and int(segment) < len(container):
            return container[int(segment)]
        raise OverridePathError(segment)

    raise OverridePathError(segment)


def set_path(data: dict, field_path: str, value: Any) -> None:
    """Set ``value`` at a dotted path inside ``data`` (in place).

    When the target is a data point the amount is replaced and the source
    marked as a manual entry; source snippets are kept.

    Raises:
        OverridePathError: If the path cannot be resolved
    """
    segments = [s for s in field_path.split(".") if s]
    if not segments:
        raise OverridePathError(field_path)

    current: Any = data
    for segment in segments[:-1]:
        current = _step(current, segment, create=True)

    last = segments[-1]
    if isinstance(current, list):
        target = _step(current, last, create=False)
        raise OverridePathError(f"{field_path} points at a list element ({type(target).__name__})")
    if not isinstance(current, dict):
        raise OverridePathError(field_path)

    existing = current.get(last)
    value = _coerce_value(value, existing)
    if isinstance(existing, dict) and ("amount" in existing or "value" in existing):
        key = "amount" if "amount" in existing else "value"
        existing[key] = value
        existing["source_type"] = "manual_entry"
    elif "yearly_data" in segments and isinstance(value, (int, float)):
        # Yearly figures are data points; a manual 0 must still count as recorded
        current[last] = {"amount": value, "source_type": "manual_entry"}
    else:
        current[last] = value


def apply_manual_overrides(
    blueprint: Union[Box3Blueprint, dict],
    overrides: Optional[Iterable[Union[ManualOverride, dict]]] = None,
) -> Box3Blueprint:
    """Merge manual overrides into a copy of the blueprint.

    Overrides stored in the blueprint are applied first, then the given ones,
    so a later override of the same path wins. The input is not modified.
    Paths that do not resolve are logged and skipped.

    Args:
        blueprint: Blueprint model or raw blueprint dict
        overrides: Additional overrides supplied by the user

    Returns:
        Validated blueprint with all overrides applied
    """
    if isinstance(blueprint, Box3Blueprint):
        base = blueprint
    else:
        base = Box3Blueprint.model_validate(blueprint)

    pending = list(base.manual_overrides)
    for override in overrides or []:
        if isinstance(override, ManualOverride):
            pending.append(override)
        else:
            pending.append(ManualOverride.model_validate(override))

    if not pending:
        return base

    data = base.model_dump(mode="python", exclude_none=True)
    applied = 0
    for override in pending:
        try:
            set_path(data, override.field_path, override.override_value)
            applied += 1
            logger.debug(
                f"Applied override {override.field_path} = {override.override_value!r}"
                + (f" ({override.reason})" if override.reason else "")
            )
        except OverridePathError as e:
            logger.warning(f"Skipping override {override.field_path}: path not found ({e})")

    logger.info(f"Applied {applied} of {len(pending)} manual overrides")
    return Box3Blueprint.model_validate(data)
