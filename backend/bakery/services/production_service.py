# Overview: Service-layer operations for production; manages batch lifecycle and recipes.

"""
Production batches turn ingredient stock into product stock.

LIFECYCLE:
1. start: baker requests a batch from a recipe (pending_approval)
2. approve: storekeeper releases every ingredient at once (in_production)
3. complete: baker reports produced/wasted quantities; produced goods go to
   the storekeeper as a pending production_return transfer
decline / cancel: only while pending_approval, no stock effect

Production logs and ingredient stock logs are written after commit
(see audit_service).
"""

from __future__ import annotations

from ..extensions import db
from ..models import (
    Ingredient,
    IngredientStockLog,
    Product,
    ProductionBatch,
    ProductionLog,
    Recipe,
    Staff,
    Transfer,
    WasteLog,
)
from ..models.documents import TRANSFER_KIND_PRODUCTION_RETURN
from ..time_utils import utcnow
from . import audit_service, stock_service
from .concurrency import lock_for_update, run_in_transaction
from .errors import InvalidStateError, NotFoundError, ValidationError
from .results import action_boundary
from .transfer_service import PRODUCTION_RETURN_NOTE_PREFIX
from .workflow import (
    BATCH_MACHINE,
    BATCH_STATUS_CANCELLED,
    BATCH_STATUS_COMPLETED,
    BATCH_STATUS_DECLINED,
    BATCH_STATUS_IN_PRODUCTION,
    BATCH_STATUS_PENDING_APPROVAL,
    TRANSFER_STATUS_PENDING,
)


BATCH_SIZE_FULL = "full"
BATCH_SIZE_HALF = "half"
BATCH_SIZE_FACTORS = {BATCH_SIZE_FULL: 1, BATCH_SIZE_HALF: 0.5}

PRODUCTION_WASTE_REASON = "Production Waste"
RETURNED_UNUSED_REASON = "Returned unused from production"


def _load_batch_for_update(batch_id: str) -> ProductionBatch | None:
    return lock_for_update(db.session.query(ProductionBatch).filter_by(id=batch_id)).first()


def _batch_label(batch: ProductionBatch) -> str:
    return f"{batch.quantity_to_produce} of {batch.product_name}: {batch.id}"


# =============================================================================
# BATCH LIFECYCLE
# =============================================================================

@action_boundary("start production batch")
def start_production_batch(recipe_id: str, quantity_to_produce: int, batch_size: str, user):
    """Create a pending_approval batch with the recipe's ingredients scaled to the batch size."""
    if batch_size not in BATCH_SIZE_FACTORS:
        raise ValidationError(f"Unknown batch size: {batch_size}")
    if not isinstance(quantity_to_produce, int) or quantity_to_produce <= 0:
        raise ValidationError("Quantity to produce must be a positive whole number.")

    factor = BATCH_SIZE_FACTORS[batch_size]

    def _op():
        recipe = db.session.get(Recipe, recipe_id)
        if not recipe:
            raise NotFoundError("Recipe not found.")

        ingredients = [
            {**line, "quantity": line["quantity"] * factor}
            for line in (recipe.ingredients or [])
        ]
        batch = ProductionBatch(
            recipe_id=recipe.id,
            recipe_name=recipe.name,
            product_id=recipe.product_id,
            product_name=recipe.product_name or recipe.name,
            requested_by_id=user.staff_id,
            requested_by_name=user.name,
            quantity_to_produce=quantity_to_produce,
            batch_size=batch_size,
            status=BATCH_STATUS_PENDING_APPROVAL,
            created_at=utcnow(),
            ingredients=ingredients,
        )
        db.session.add(batch)
        db.session.flush()
        return batch.id, recipe.name

    batch_id, recipe_name = run_in_transaction(_op)
    audit_service.log_production_action("Batch Requested", f"Requested a batch of {recipe_name}", user)
    return {"batchId": batch_id}


@action_boundary("approve ingredient request")
def approve_ingredient_request(batch_id: str, ingredients, user):
    """
    Release every requested ingredient for a pending batch, or none.

    Each line records the ingredient's stock before and after the release
    (openingStock / closingStock).
    """
    lines = stock_service.validate_items(ingredients, id_key="ingredientId", allow_fractional=True)

    def _op():
        batch = _load_batch_for_update(batch_id)
        if batch is None or batch.status != BATCH_STATUS_PENDING_APPROVAL:
            raise InvalidStateError("Batch is not pending approval.")
        BATCH_MACHINE.require(batch.status, BATCH_STATUS_IN_PRODUCTION)

        stock_by_id = stock_service.require_ingredients(lines)

        released = []
        for line in lines:
            ingredient = stock_by_id[line["ingredientId"]]
            opening = ingredient.stock or 0.0
            ingredient.stock = opening - line["quantity"]
            released.append({**line, "openingStock": opening, "closingStock": ingredient.stock})

        batch.status = BATCH_STATUS_IN_PRODUCTION
        batch.approved_at = utcnow()
        batch.ingredients = released
        db.session.flush()
        return {
            "product_name": batch.product_name,
            "requested_by_name": batch.requested_by_name,
            "label": _batch_label(batch),
        }

    info = run_in_transaction(_op)

    audit_service.log_ingredient_movement(
        ingredient_name=f"Production Batch: {info['product_name']}",
        change=-sum(line["quantity"] for line in lines),
        reason=f"Production: {info['product_name']}",
        staff_name=info["requested_by_name"] or "Unknown",
        log_ref_id=batch_id,
    )
    audit_service.log_production_action("Batch Approved", f"Approved batch for {info['label']}", user)
    return {"batchId": batch_id}


def _close_pending_batch(batch_id: str, target: str, message: str) -> str:
    def _op():
        batch = _load_batch_for_update(batch_id)
        if batch is None:
            raise NotFoundError("Production batch not found.")
        BATCH_MACHINE.require(batch.status, target, message)
        batch.status = target
        db.session.flush()
        return _batch_label(batch)

    return run_in_transaction(_op)


@action_boundary("decline production batch")
def decline_production_batch(batch_id: str, user):
    label = _close_pending_batch(batch_id, BATCH_STATUS_DECLINED, "Only pending batches can be declined.")
    audit_service.log_production_action("Batch Declined", f"Declined batch for {label}", user)
    return {"batchId": batch_id}


@action_boundary("cancel production batch")
def cancel_production_batch(batch_id: str, user):
    label = _close_pending_batch(batch_id, BATCH_STATUS_CANCELLED, "Only pending batches can be cancelled.")
    audit_service.log_production_action("Batch Cancelled", f"Cancelled batch for {label}", user)
    return {"batchId": batch_id}


def _product_lines(items) -> list[dict]:
    if not items:
        return []
    return [
        {
            "productId": item["productId"],
            "productName": item.get("productName") or item["productId"],
            "quantity": item["quantity"],
        }
        for item in stock_service.validate_items(items)
    ]


@action_boundary("complete production batch")
def complete_production_batch(batch_id: str, produced_items, wasted_items, storekeeper_id: str, user):
    """
    Finish an in_production batch.

    Produced goods do not enter central stock here; they travel as a pending
    production_return transfer the storekeeper must accept. Wasted goods
    are only logged.
    """
    produced = _product_lines(produced_items)
    wasted = _product_lines(wasted_items)

    def _op():
        batch = _load_batch_for_update(batch_id)
        if batch is None:
            raise NotFoundError("Production batch not found.")
        BATCH_MACHINE.require(
            batch.status, BATCH_STATUS_COMPLETED, "Only batches in production can be completed.",
        )

        storekeeper = db.session.get(Staff, storekeeper_id)
        if not storekeeper:
            raise NotFoundError("Target storekeeper does not exist.")

        now = utcnow()
        total_produced = sum(item["quantity"] for item in produced)
        total_wasted = sum(item["quantity"] for item in wasted)

        batch.status = BATCH_STATUS_COMPLETED
        batch.successfully_produced = total_produced
        batch.wasted = total_wasted
        batch.completed_at = now

        transfer_id = None
        if produced:
            transfer = Transfer(
                from_staff_id=user.staff_id,
                from_staff_name=user.name,
                to_staff_id=storekeeper.staff_id,
                to_staff_name=storekeeper.name,
                items=produced,
                date=now,
                status=TRANSFER_STATUS_PENDING,
                kind=TRANSFER_KIND_PRODUCTION_RETURN,
                is_sales_run=False,
                notes=f"{PRODUCTION_RETURN_NOTE_PREFIX} {batch_id}",
                total_revenue=0.0,
                total_collected=0.0,
            )
            db.session.add(transfer)
            db.session.flush()
            transfer_id = transfer.id

        if wasted:
            categories = {
                p.id: p.category
                for p in db.session.query(Product).filter(
                    Product.id.in_([item["productId"] for item in wasted])
                ).all()
            }
            for item in wasted:
                db.session.add(WasteLog(
                    product_id=item["productId"],
                    product_name=item["productName"],
                    product_category=categories.get(item["productId"]),
                    quantity=item["quantity"],
                    reason=PRODUCTION_WASTE_REASON,
                    notes=f"From production batch {batch_id}",
                    staff_id=user.staff_id,
                    staff_name=user.name,
                    date=now,
                ))

        db.session.flush()
        return transfer_id, total_produced

    transfer_id, total_produced = run_in_transaction(_op)
    audit_service.log_production_action(
        "Batch Completed",
        f"Completed batch of {batch_id} with {total_produced} produced items.",
        user,
    )
    return {"batchId": batch_id, "transferId": transfer_id}


@action_boundary("return ingredients")
def return_unused_ingredients(items, user):
    """Put unused ingredients back into stock, one stock log row per line."""
    if not items:
        raise ValidationError("No items to return.")
    lines = stock_service.validate_items(items, id_key="ingredientId", allow_fractional=True)

    def _op():
        now = utcnow()
        for line in lines:
            ingredient = stock_service.add_ingredient(line["ingredientId"], line["quantity"])
            db.session.add(IngredientStockLog(
                ingredient_id=ingredient.id,
                ingredient_name=line.get("ingredientName") or ingredient.name,
                change=line["quantity"],
                reason=RETURNED_UNUSED_REASON,
                date=now,
                staff_name=user.name,
                log_ref_id=f"manual-return-{user.staff_id}",
            ))
        db.session.flush()

    run_in_transaction(_op)
    return {"returned": len(lines)}


# =============================================================================
# RECIPES
# =============================================================================

def _recipe_ingredients(raw) -> list[dict]:
    lines = stock_service.validate_items(raw, id_key="ingredientId", allow_fractional=True)
    ingredients = {
        i.id: i
        for i in db.session.query(Ingredient).filter(
            Ingredient.id.in_([line["ingredientId"] for line in lines])
        ).all()
    }
    result = []
    for line in lines:
        ingredient = ingredients.get(line["ingredientId"])
        if ingredient is None:
            raise NotFoundError(f"Ingredient {line['ingredientId']} not found.")
        result.append({
            "ingredientId": ingredient.id,
            "ingredientName": ingredient.name,
            "quantity": line["quantity"],
            "unit": line.get("unit") or ingredient.unit,
        })
    return result


@action_boundary("save recipe")
def save_recipe(data: dict, recipe_id: str | None, user):
    """Create a recipe, or update it when recipe_id is given."""
    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationError("Recipe name is required.")

    def _op():
        product_id = data.get("productId")
        product_name = data.get("productName")
        if product_id:
            product = db.session.get(Product, product_id)
            if not product:
                raise NotFoundError("Product not found.")
            product_name = product.name

        ingredients = _recipe_ingredients(data.get("ingredients"))

        if recipe_id:
            recipe = db.session.get(Recipe, recipe_id)
            if not recipe:
                raise NotFoundError("Recipe not found.")
        else:
            recipe = Recipe()
            db.session.add(recipe)

        recipe.name = name
        recipe.description = data.get("description")
        recipe.product_id = product_id
        recipe.product_name = product_name
        recipe.ingredients = ingredients
        db.session.flush()
        return recipe.id

    saved_id = run_in_transaction(_op)
    if recipe_id:
        audit_service.log_production_action("Recipe Updated", f"Updated recipe: {name}", user)
    else:
        audit_service.log_production_action("Recipe Created", f"Created new recipe: {name}", user)
    return {"recipeId": saved_id}


@action_boundary("delete recipe")
def delete_recipe(recipe_id: str, user):
    def _op():
        recipe = db.session.get(Recipe, recipe_id)
        if not recipe:
            raise NotFoundError("Recipe not found.")
        in_use = db.session.query(ProductionBatch).filter(
            ProductionBatch.recipe_id == recipe_id,
            ProductionBatch.status.in_([BATCH_STATUS_PENDING_APPROVAL, BATCH_STATUS_IN_PRODUCTION]),
        ).count()
        if in_use:
            raise InvalidStateError("Recipe has open production batches.")
        name = recipe.name
        db.session.delete(recipe)
        return name

    name = run_in_transaction(_op)
    audit_service.log_production_action("Recipe Deleted", f"Deleted recipe: {name}", user)
    return {"recipeId": recipe_id}


# =============================================================================
# QUERIES
# =============================================================================

def get_recipes() -> list[dict]:
    return [r.to_dict() for r in db.session.query(Recipe).order_by(Recipe.name).all()]


def get_production_batch(batch_id: str) -> dict | None:
    batch = db.session.get(ProductionBatch, batch_id)
    return batch.to_dict() if batch else None


def get_production_batches() -> dict[str, list[dict]]:
    batches = [
        b.to_dict()
        for b in db.session.query(ProductionBatch).order_by(ProductionBatch.created_at.desc()).all()
    ]
    return {
        "pending": [b for b in batches if b["status"] == BATCH_STATUS_PENDING_APPROVAL],
        "in_production": [b for b in batches if b["status"] == BATCH_STATUS_IN_PRODUCTION],
        "completed": [b for b in batches if b["status"] == BATCH_STATUS_COMPLETED],
        "other": [
            b for b in batches if b["status"] in (BATCH_STATUS_DECLINED, BATCH_STATUS_CANCELLED)
        ],
    }


def get_production_logs() -> list[dict]:
    logs = db.session.query(ProductionLog).order_by(ProductionLog.timestamp.desc()).all()
    return [log.to_dict() for log in logs]


def get_ingredient_stock_logs() -> list[dict]:
    logs = db.session.query(IngredientStockLog).order_by(IngredientStockLog.date.desc()).all()
    return [log.to_dict() for log in logs]
