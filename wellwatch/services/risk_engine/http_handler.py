"""Risk Engine HTTP handler - assessment endpoints.

The scheduled job calls ``/assessments/<user_id>/run`` once per user per
assessment interval; the app calls ``/assessments/calculate`` for an
on-device preview and ``/latest`` for the dashboard.
"""
import logging
import os
from datetime import datetime
from typing import Any, List, Optional

from flask import Flask, request, jsonify

from wellwatch.shared.database import RepositoryError, get_connection_manager
from wellwatch.shared.models import DailyStepRecord, MoodRecord
from wellwatch.shared.utils import hash_pii, configure_pii_salt
from wellwatch.services.alert_service import RiskAlertPublisher, RiskAlertService
from .aggregator import RiskAggregator
from .config import RiskServiceConfig
from .errors import HealthDataUnavailableError, MoodHistoryUnavailableError
from .handler import RiskAssessmentHandler
from .messages import describe_risk
from .repository import AssessmentRepository, HealthDataRepository
from .sanitize import sanitize_intensity, sanitize_steps, sanitize_usage_days

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.json.ensure_ascii = False

pii_salt = os.getenv("PII_HASH_SALT", "default_dev_salt_change_in_production_32chars")
configure_pii_salt(pii_salt)

service_config = RiskServiceConfig.from_env()
connection_manager = get_connection_manager()

health_data = HealthDataRepository(connection_manager)
assessment_repository = AssessmentRepository(connection_manager)
alert_service = RiskAlertService(
    publisher=RiskAlertPublisher(
        stream_name=service_config.alert_stream_name,
        enabled=service_config.alerts_enabled,
        region=service_config.aws_region,
    )
)
aggregator = RiskAggregator(mood_source=health_data, assessment_store=assessment_repository)
assessment_handler = RiskAssessmentHandler(
    health_data=health_data,
    assessment_store=assessment_repository,
    alert_service=alert_service,
    service_config=service_config,
    aggregator=aggregator,
)


class RequestValidationError(ValueError):
    pass


def _parse_step_records(items: Any, field_name: str) -> List[DailyStepRecord]:
    if items is None:
        return []
    if not isinstance(items, list):
        raise RequestValidationError(f"{field_name} must be a list")
    return [
        DailyStepRecord(date=str(item.get("date", "")), steps=sanitize_steps(item.get("steps")))
        for item in items
        if isinstance(item, dict)
    ]


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    return datetime.utcnow()


def _parse_mood_history(items: Any, user_id: str) -> Optional[List[MoodRecord]]:
    """None means "not supplied", so the repository is consulted."""
    if items is None:
        return None
    if not isinstance(items, list):
        raise RequestValidationError("mood_history must be a list")
    return [
        MoodRecord(
            id=str(item.get("id", index)),
            user_id=user_id,
            intensity=sanitize_intensity(item.get("intensity")),
            created_at=_parse_timestamp(item.get("created_at")),
            mood_label=item.get("mood_label"),
        )
        for index, item in enumerate(items)
        if isinstance(item, dict)
    ]


def _parse_step_target(value: Any) -> int:
    if value is None:
        return service_config.default_step_target
    try:
        return int(value)
    except (TypeError, ValueError):
        raise RequestValidationError("step_target must be an integer")


@app.route("/health", methods=["GET"])
def health():
    """Health check endpoint."""
    return jsonify({
        "status": "healthy",
        "service": "risk-engine",
    }), 200


@app.route("/ready", methods=["GET"])
def ready():
    """Readiness check; the database must answer before traffic is accepted."""
    if assessment_handler is None:
        return jsonify({"status": "not_ready"}), 503

    try:
        if not connection_manager.is_initialized:
            connection_manager.initialize()
    except Exception as e:
        logger.warning("READINESS_DATABASE_UNAVAILABLE", extra={"error": str(e)})
        return jsonify({"status": "not_ready", "database": "unavailable"}), 503

    database = connection_manager.health_check()
    if not database.get("healthy"):
        return jsonify({"status": "not_ready", "database": database.get("status")}), 503
    return jsonify({"status": "ready", "database": database.get("status")}), 200


@app.route("/assessments/calculate", methods=["POST"])
def calculate_assessment():
    """Compute an assessment from supplied data without saving it.

    Request Body:
        {
            "user_id": "user_123",
            "weekly_steps": [{"date": "2024-01-09", "steps": 5000}, ...],
            "monthly_steps": [...],
            "step_target": 4000,
            "app_usage_days": 5,
            "mood_history": [{"intensity": 4, "created_at": "..."}]   (optional)
        }

    Response:
        {
            "assessment": {...},
            "summary": "現在の健康状態は良好です。..."
        }
    """
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({"error": "Request body required"}), 400
        if not isinstance(data, dict):
            return jsonify({"error": "Request body must be a JSON object"}), 400

        user_id = data.get("user_id")
        if not user_id:
            return jsonify({"error": "Missing user_id"}), 400

        try:
            weekly_steps = _parse_step_records(data.get("weekly_steps"), "weekly_steps")
            monthly_steps = _parse_step_records(data.get("monthly_steps"), "monthly_steps")
            mood_history = _parse_mood_history(data.get("mood_history"), user_id)
            step_target = _parse_step_target(data.get("step_target"))
        except RequestValidationError as e:
            return jsonify({"error": str(e)}), 400

        assessment = aggregator.calculate_overall_risk(
            user_id=user_id,
            weekly_steps=weekly_steps,
            monthly_steps=monthly_steps,
            step_target=step_target,
            app_usage_days=sanitize_usage_days(data.get("app_usage_days", 0)),
            mood_history=mood_history,
        )

        return jsonify({
            "assessment": assessment.to_dict(),
            "summary": describe_risk(assessment.overall_level),
        }), 200

    except MoodHistoryUnavailableError as e:
        logger.error("ASSESSMENT_CALCULATE_MOOD_UNAVAILABLE", extra={"error": str(e)})
        return jsonify({"error": "Mood history unavailable"}), 503
    except Exception as e:
        logger.error("ASSESSMENT_CALCULATE_ERROR", extra={"error": str(e)})
        return jsonify({"error": "Failed to calculate assessment"}), 500


@app.route("/assessments/<user_id>/run", methods=["POST"])
def run_assessment(user_id: str):
    """Run, save and alert on a full assessment for one user.

    Request Body (optional):
        {"step_target": 5000}
    """
    try:
        data = request.get_json(silent=True)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return jsonify({"error": "Request body must be a JSON object"}), 400

        step_target = data.get("step_target")
        if step_target is not None:
            try:
                step_target = int(step_target)
            except (TypeError, ValueError):
                return jsonify({"error": "step_target must be an integer"}), 400

        outcome = assessment_handler.run_assessment(user_id, step_target=step_target)

        return jsonify(outcome.to_dict()), 201

    except (HealthDataUnavailableError, MoodHistoryUnavailableError) as e:
        logger.error(
            "ASSESSMENT_RUN_DATA_UNAVAILABLE",
            extra={"user_id_hash": hash_pii(user_id), "error": str(e)}
        )
        return jsonify({"error": "Health data unavailable"}), 503
    except Exception as e:
        logger.error(
            "ASSESSMENT_RUN_ERROR",
            extra={"user_id_hash": hash_pii(user_id), "error": str(e)}
        )
        return jsonify({"error": "Failed to run assessment"}), 500


@app.route("/assessments/<user_id>/latest", methods=["GET"])
def latest_assessment(user_id: str):
    """Most recent stored assessment for the dashboard."""
    try:
        assessment = assessment_handler.get_latest_assessment(user_id)
    except RepositoryError as e:
        logger.error(
            "ASSESSMENT_LATEST_ERROR",
            extra={"user_id_hash": hash_pii(user_id), "error": str(e)}
        )
        return jsonify({"error": "Failed to load assessment"}), 500

    if assessment is None:
        return jsonify({"error": "No assessment found"}), 404

    return jsonify({
        "assessment": assessment.to_dict(),
        "summary": describe_risk(assessment.overall_level),
    }), 200


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    port = int(os.getenv("PORT", "8004"))
    app.run(host="0.0.0.0", port=port, debug=False)
