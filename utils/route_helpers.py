"""
Shared route helper utilities.

Reduces boilerplate in the composition routes for payload parsing and
preset lookup.
"""
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException

from composition_engine.presets import create_config_from_preset
from composition_engine.types import CompositionConfig

T = TypeVar('T')


def parse_payload(parse: Callable[[Any], T], payload: Any, what: str = "payload") -> T:
    """
    Parse a wire-format payload into engine types.

    Args:
        parse: Parser such as CompositionConfig.from_dict
        payload: Raw request data
        what: Name of the payload for error messages

    Returns:
        The parsed value

    Raises:
        HTTPException: 400 if the payload is malformed
    """
    try:
        return parse(payload)
    except (ValueError, TypeError) as e:
        logging.warning(f"Rejected malformed {what}: {e}")
        raise HTTPException(status_code=400, detail=f"Invalid {what}: {e}")


def require_preset_config(preset_id: str) -> CompositionConfig:
    """
    Get a fresh composition config for a preset.

    Raises:
        HTTPException: 404 if the preset does not exist
    """
    config = create_config_from_preset(preset_id)
    if config is None:
        raise HTTPException(status_code=404, detail=f"Layout preset not found: {preset_id}")
    return config


def composition_operation(operation: Callable[[], T], error_context: str = "operation") -> T:
    """
    Execute a composition operation with standard error handling.

    Args:
        operation: Callable to execute
        error_context: Context string for error logging

    Returns:
        The operation's result

    Raises:
        HTTPException: 400 for ValueError, 500 on any other error
    """
    try:
        return operation()
    except HTTPException:
        raise
    except ValueError as e:
        logging.warning(f"Failed to {error_context}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logging.error(f"Failed to {error_context}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
