# Overview: Flask API routes for production operations; parses input and returns JSON responses.

# backend/bakery/routes/production.py
"""
Production batch and recipe API routes.

Bakers request batches, storekeepers release ingredients, bakers complete
batches and send finished goods back to the store.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_role
from ..models.staff import ROLE_BAKER, ROLE_CHIEF_BAKER, ROLE_MANAGER, ROLE_STOREKEEPER
from ..services import production_service
from .responses import action_response, internal_error, missing_field


production_bp = Blueprint("production", __name__, url_prefix="/api/production")

BAKER_ROLES = (ROLE_BAKER, ROLE_CHIEF_BAKER, ROLE_MANAGER)
RELEASE_ROLES = (ROLE_STOREKEEPER, ROLE_MANAGER)


@production_bp.post("/batches")
@require_auth
@require_role(*BAKER_ROLES)
def start_batch_route():
    """
    Request a production batch.

    Request body:
    {
        "recipe_id": "...",
        "quantity_to_produce": 120,
        "batch_size": "full" | "half"
    }
    """
    try:
        data = request.get_json() or {}
        result = production_service.start_production_batch(
            data["recipe_id"],
            data["quantity_to_produce"],
            data.get("batch_size", production_service.BATCH_SIZE_FULL),
            g.current_staff,
        )
        return action_response(result, 201)

    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to start production batch")
        return internal_error()


@production_bp.get("/batches")
@require_auth
def list_batches_route():
    return jsonify(production_service.get_production_batches()), 200


@production_bp.get("/batches/<batch_id>")
@require_auth
def get_batch_route(batch_id: str):
    batch = production_service.get_production_batch(batch_id)
    if batch is None:
        return jsonify({"error": "Production batch not found."}), 404
    return jsonify({"batch": batch}), 200


@production_bp.post("/batches/<batch_id>/approve")
@require_auth
@require_role(*RELEASE_ROLES)
def approve_batch_route(batch_id: str):
    """
    Release ingredients for a pending batch.

    Request body:
    {
        "ingredients": [{"ingredientId": "...", "ingredientName": "Flour", "quantity": 25, "unit": "kg"}]
    }
    """
    try:
        data = request.get_json() or {}
        result = production_service.approve_ingredient_request(
            batch_id, data["ingredients"], g.current_staff,
        )
        return action_response(result)

    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to approve ingredient request")
        return internal_error()


@production_bp.post("/batches/<batch_id>/decline")
@require_auth
@require_role(*RELEASE_ROLES)
def decline_batch_route(batch_id: str):
    return action_response(production_service.decline_production_batch(batch_id, g.current_staff))


@production_bp.post("/batches/<batch_id>/cancel")
@require_auth
@require_role(*BAKER_ROLES)
def cancel_batch_route(batch_id: str):
    return action_response(production_service.cancel_production_batch(batch_id, g.current_staff))


@production_bp.post("/batches/<batch_id>/complete")
@require_auth
@require_role(*BAKER_ROLES)
def complete_batch_route(batch_id: str):
    """
    Complete a batch.

    Request body:
    {
        "storekeeper_id": "...",
        "produced_items": [{"productId": "...", "productName": "...", "quantity": 110}],
        "wasted_items": [{"productId": "...", "productName": "...", "quantity": 10}]
    }
    """
    try:
        data = request.get_json() or {}
        result = production_service.complete_production_batch(
            batch_id,
            data.get("produced_items") or [],
            data.get("wasted_items") or [],
            data["storekeeper_id"],
            g.current_staff,
        )
        return action_response(result)

    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to complete production batch")
        return internal_error()


@production_bp.post("/ingredients/return")
@require_auth
@require_role(*BAKER_ROLES)
def return_ingredients_route():
    try:
        data = request.get_json() or {}
        return action_response(
            production_service.return_unused_ingredients(data["items"], g.current_staff)
        )
    except KeyError as e:
        return missing_field(e)


@production_bp.get("/logs")
@require_auth
def production_logs_route():
    return jsonify({"logs": production_service.get_production_logs()}), 200


@production_bp.get("/ingredient-logs")
@require_auth
def ingredient_logs_route():
    return jsonify({"logs": production_service.get_ingredient_stock_logs()}), 200


# =============================================================================
# RECIPES
# =============================================================================

@production_bp.get("/recipes")
@require_auth
def list_recipes_route():
    return jsonify({"recipes": production_service.get_recipes()}), 200


@production_bp.post("/recipes")
@require_auth
@require_role(ROLE_CHIEF_BAKER, ROLE_MANAGER)
def create_recipe_route():
    data = request.get_json() or {}
    return action_response(production_service.save_recipe(data, None, g.current_staff), 201)


@production_bp.put("/recipes/<recipe_id>")
@require_auth
@require_role(ROLE_CHIEF_BAKER, ROLE_MANAGER)
def update_recipe_route(recipe_id: str):
    data = request.get_json() or {}
    return action_response(production_service.save_recipe(data, recipe_id, g.current_staff))


@production_bp.delete("/recipes/<recipe_id>")
@require_auth
@require_role(ROLE_CHIEF_BAKER, ROLE_MANAGER)
def delete_recipe_route(recipe_id: str):
    return action_response(production_service.delete_recipe(recipe_id, g.current_staff))
