from flask import Blueprint, request, current_app
from sqlalchemy.exc import IntegrityError
from models import db
from models.item import Item
from app.version import API_PREFIX
from app.exceptions import NotFoundError, ConflictError
from app.schemas.inventory import AddItemRequest, UpdateItemRequest
from app.services.alerts import evaluate_alerts
from app.utils import auth_required, current_owner_id, transactional, ok, validate_schema

inventory_bp = Blueprint("inventory", __name__, url_prefix=f"{API_PREFIX}/inventory")


def _owned_item(item_id):
    item = Item.query.filter_by(id=item_id, owner_id=current_owner_id()).first()
    if not item:
        raise NotFoundError("Item not found")
    return item


def _ensure_unique_name(name, exclude_id=None):
    query = Item.query.filter_by(owner_id=current_owner_id(), name=name)
    if exclude_id is not None:
        query = query.filter(Item.id != exclude_id)
    if query.first():
        raise ConflictError("Item already exists")


def _alerts():
    return [alert.to_dict() for alert in evaluate_alerts(current_owner_id())]


def _save(message):
    try:
        with transactional(message):
            pass
    except IntegrityError:
        raise ConflictError("Item already exists")


@inventory_bp.route("", methods=["POST"])
@auth_required
@validate_schema(AddItemRequest)
def add_item():
    data = request.validated_data
    _ensure_unique_name(data.name)
    limit = data.low_stock_limit
    if limit is None:
        limit = current_app.config["DEFAULT_LOW_STOCK_LIMIT"]
    item = Item(
        owner_id=current_owner_id(),
        name=data.name,
        sku=data.sku,
        category=data.category,
        cost_price=data.cost_price,
        selling_price=data.selling_price,
        stock_qty=data.stock_qty,
        low_stock_limit=limit,
        unit=data.unit or "pcs",
    )
    db.session.add(item)
    _save("Failed to add item")
    current_app.logger.info("Item added: %s", item.name)
    return ok({"item": item.to_dict(), "alerts": _alerts()}, message="Item added", status=201)


@inventory_bp.route("", methods=["GET"])
@auth_required
def get_items():
    items = (
        Item.query.filter_by(owner_id=current_owner_id())
        .order_by(Item.created_at.desc(), Item.id.desc())
        .all()
    )
    return ok([item.to_dict() for item in items])


@inventory_bp.route("/low-stock", methods=["GET"])
@auth_required
def low_stock():
    return ok(_alerts())


@inventory_bp.route("/<int:item_id>", methods=["GET"])
@auth_required
def get_item(item_id):
    return ok(_owned_item(item_id).to_dict())


@inventory_bp.route("/<int:item_id>", methods=["PUT"])
@auth_required
@validate_schema(UpdateItemRequest)
def update_item(item_id):
    item = _owned_item(item_id)
    data = request.validated_data
    changes = data.model_dump(include=data.model_fields_set)
    if changes.get("name") and changes["name"] != item.name:
        _ensure_unique_name(changes["name"], exclude_id=item.id)
    for field, value in changes.items():
        if value is None and field in ("name", "cost_price", "selling_price", "stock_qty",
                                       "low_stock_limit", "unit"):
            continue
        setattr(item, field, value)
    _save("Failed to update item")
    current_app.logger.info("Item updated: %s", item.name)
    return ok({"item": item.to_dict(), "alerts": _alerts()}, message="Item updated")


@inventory_bp.route("/<int:item_id>", methods=["DELETE"])
@auth_required
def delete_item(item_id):
    item = _owned_item(item_id)
    name = item.name
    with transactional("Failed to delete item"):
        db.session.delete(item)
    current_app.logger.info("Item deleted: %s", name)
    return ok(message="Item deleted")
