"""
REST API endpoints for Task management.

Every response uses the same envelope: ``success`` plus ``data``,
``count``, ``message`` or ``error`` as appropriate. Each handler performs
at most one store call; anything the store raises is answered with a
500 envelope carrying the error's message.

Endpoints:
    GET    /              - Capability listing
    GET    /tasks         - List all tasks (due date asc, newest first)
    GET    /tasks/<id>    - Get a single task by ID
    POST   /tasks         - Create a new task
    PUT    /tasks/<id>    - Update an existing task
    DELETE /tasks/<id>    - Delete a task
"""

import logging
from typing import Any

from flask import Blueprint, Response, jsonify, request

from eulist import __version__, get_store
from eulist.schemas import CreateTaskRequest, RequestValidationError, UpdateTaskRequest

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)

ENDPOINTS = {
    "GET /tasks": "List all tasks",
    "GET /tasks/:id": "Get a single task",
    "POST /tasks": "Create a new task",
    "PUT /tasks/:id": "Update a task",
    "DELETE /tasks/:id": "Delete a task",
}


# -----------------------------------------------------------------------------
# Helper Functions
# -----------------------------------------------------------------------------

def json_body() -> dict[str, Any]:
    """Return the request's JSON object, or an empty dict for anything else."""
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def error_response(status: int, error: str, message: str) -> tuple[Response, int]:
    return jsonify({"success": False, "error": error, "message": message}), status


def not_found(task_id: str) -> tuple[Response, int]:
    logger.warning("Task %s not found", task_id)
    return error_response(404, "Task not found", f"No task found with ID: {task_id}")


def invalid_request(exc: RequestValidationError) -> tuple[Response, int]:
    logger.warning("Validation failed: %s", exc.message)
    return error_response(400, exc.error, exc.message)


def server_error(error: str, exc: Exception) -> tuple[Response, int]:
    logger.exception("%s: %s", error, exc)
    return error_response(500, error, str(exc))


# -----------------------------------------------------------------------------
# API Endpoints
# -----------------------------------------------------------------------------

@api_bp.route("/", methods=["GET"])
def index() -> tuple[Response, int]:
    """Describe the service and its endpoints."""
    return jsonify({
        "message": "EulisT backend is running",
        "version": __version__,
        "endpoints": ENDPOINTS,
    }), 200


@api_bp.route("/tasks", methods=["GET"])
def get_tasks() -> tuple[Response, int]:
    """
    List all tasks.

    Returns:
        JSON response with every task ordered by due date ascending,
        then creation time descending, and 200 status code.
    """
    logger.info("GET /tasks - Fetching all tasks")

    try:
        tasks = get_store().list_tasks()
    except Exception as exc:  # noqa: BLE001
        return server_error("Error fetching tasks", exc)

    logger.info("Found %d tasks", len(tasks))
    return jsonify({"success": True, "count": len(tasks), "data": tasks}), 200


@api_bp.route("/tasks/<task_id>", methods=["GET"])
def get_task(task_id: str) -> tuple[Response, int]:
    """
    Get a single task by ID.

    Args:
        task_id: The task's 24-hex-digit identifier.

    Returns:
        JSON response with task data and 200 status code,
        or error message and 404 if not found.
    """
    logger.info("GET /tasks/%s - Fetching task", task_id)

    try:
        task = get_store().get_task(task_id)
    except Exception as exc:  # noqa: BLE001
        return server_error("Error fetching task", exc)

    if task is None:
        return not_found(task_id)
    return jsonify({"success": True, "data": task}), 200


@api_bp.route("/tasks", methods=["POST"])
def create_task() -> tuple[Response, int]:
    """
    Create a new task.

    Request Body (JSON):
        title: Task title (required)
        date: Due date in ISO format, strictly in the future (required)

    Returns:
        JSON response with created task and 201 status code,
        or error message and 400 if validation fails.
    """
    payload = json_body()
    logger.info("POST /tasks - Creating task %r", payload.get("title"))

    try:
        body = CreateTaskRequest.from_json(payload)
    except RequestValidationError as exc:
        return invalid_request(exc)

    try:
        task = get_store().create_task(body.title, body.date)
    except Exception as exc:  # noqa: BLE001
        return server_error("Error creating task", exc)

    logger.info("Created task with ID: %s", task["_id"])
    return jsonify({
        "success": True,
        "message": "Task created successfully",
        "data": task,
    }), 201


@api_bp.route("/tasks/<task_id>", methods=["PUT"])
def update_task(task_id: str) -> tuple[Response, int]:
    """
    Update an existing task.

    Only the fields present (and not null) in the body are changed.

    Args:
        task_id: The task's 24-hex-digit identifier.

    Request Body (JSON):
        title: Task title
        date: Due date in ISO format, strictly in the future
        completed: Completion flag (boolean)

    Returns:
        JSON response with updated task and 200 status code,
        or error message and 404/400 if not found or validation fails.
    """
    logger.info("PUT /tasks/%s - Updating task", task_id)

    try:
        body = UpdateTaskRequest.from_json(json_body())
    except RequestValidationError as exc:
        return invalid_request(exc)

    try:
        task = get_store().update_task(task_id, body.changes())
    except Exception as exc:  # noqa: BLE001
        return server_error("Error updating task", exc)

    if task is None:
        return not_found(task_id)

    logger.info("Updated task %s", task_id)
    return jsonify({
        "success": True,
        "message": "Task updated successfully",
        "data": task,
    }), 200


@api_bp.route("/tasks/<task_id>", methods=["DELETE"])
def delete_task(task_id: str) -> tuple[Response, int]:
    """
    Delete a task.

    Args:
        task_id: The task's 24-hex-digit identifier.

    Returns:
        JSON response with the removed task's id and title and 200
        status code, or error message and 404 if not found.
    """
    logger.info("DELETE /tasks/%s - Deleting task", task_id)

    try:
        task = get_store().delete_task(task_id)
    except Exception as exc:  # noqa: BLE001
        return server_error("Error deleting task", exc)

    if task is None:
        return not_found(task_id)

    logger.info("Deleted task %s", task_id)
    return jsonify({
        "success": True,
        "message": "Task deleted successfully",
        "data": {"id": task["_id"], "title": task["title"]},
    }), 200


# -----------------------------------------------------------------------------
# Error Handlers
# -----------------------------------------------------------------------------

@api_bp.app_errorhandler(404)
@api_bp.app_errorhandler(405)
def route_not_found(error: Exception) -> tuple[Response, int]:
    """Answer unknown paths and unsupported methods with the 404 envelope."""
    return error_response(404, "Route not found", f"Route {request.path} does not exist")


@api_bp.app_errorhandler(500)
def internal_error(error: Exception) -> tuple[Response, int]:
    """Handle 500 Internal Server errors."""
    logger.error("Internal server error: %s", error)
    return error_response(500, "Internal server error", str(error))
