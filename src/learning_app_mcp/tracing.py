"""Optional MLflow tracing for the learning-app tools.

``mlflow.gemini.autolog()`` records every ``generate_content`` call as a
child span; the ``trace()`` decorator gives each MCP tool its own root span.
Both stay off unless ``mlflow-tracing`` is installed and
``MLFLOW_TRACKING_URI`` is set (``GEMINI_TRACING_ENABLED=false`` forces off).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

try:
    import mlflow
    import mlflow.gemini

    _HAS_MLFLOW = True
except ImportError:
    _HAS_MLFLOW = False


def is_enabled() -> bool:
    """True when mlflow is importable and the config turns tracing on."""
    if not _HAS_MLFLOW:
        return False
    from .config import get_config

    return get_config().tracing_enabled


def trace(
    func: Callable | None = None,
    *,
    name: str | None = None,
    span_type: str | None = None,
    attributes: dict[str, Any] | None = None,
) -> Callable:
    """``@mlflow.trace`` when tracing is on, otherwise the identity decorator."""
    if not is_enabled():
        return func if func is not None else (lambda f: f)
    return mlflow.trace(func, name=name, span_type=span_type, attributes=attributes)


def tag_run(run_id: int, url: str) -> None:
    """Tag the active tool trace with the generation run it started or edited.

    Tagging failures are logged, never raised.
    """
    if not is_enabled():
        return
    try:
        mlflow.update_current_trace(
            tags={"learning_app.run_id": str(run_id), "learning_app.url": url}
        )
    except Exception:
        logger.debug("Could not tag trace for run %d", run_id, exc_info=True)


def setup() -> None:
    """Point MLflow at the configured tracking server and enable autologging.

    Setup failures are logged; the server starts without tracing.
    """
    if not is_enabled():
        return

    from .config import get_config

    cfg = get_config()
    try:
        mlflow.set_tracking_uri(cfg.mlflow_tracking_uri)
        mlflow.set_experiment(cfg.mlflow_experiment_name)
        mlflow.gemini.autolog()
        logger.info(
            "MLflow tracing enabled (uri=%s, experiment=%s)",
            cfg.mlflow_tracking_uri,
            cfg.mlflow_experiment_name,
        )
    except Exception:
        logger.warning("MLflow tracing setup failed — continuing without tracing", exc_info=True)


def shutdown() -> None:
    """Flush traces still queued for async logging."""
    if not is_enabled():
        return
    try:
        mlflow.flush_trace_async_logging()
    except Exception:
        logger.warning("MLflow trace flush failed", exc_info=True)
