from typing import Dict

from inventory_tracker.core.models import (
    AuditEntry,
    Booking,
    Item,
    Location,
    MovementKind,
    QuantityUnit,
)
from inventory_tracker.core.values import as_utc
from inventory_tracker.db.booking import Booking as BookingModel
from inventory_tracker.db.inventory.audit import AuditTrailEntry as AuditModel
from inventory_tracker.db.item import Item as ItemModel
from inventory_tracker.db.location import Location as LocationModel


# --- ORM row -> domain record ---------------------------------------------------


def item_from_model(model: ItemModel) -> Item:
    return Item(
        sku=model.sku,
        name=model.name,
        selling_price_minor_units=int(model.selling_price_minor_units or 0),
        quantity_unit=QuantityUnit.parse(model.quantity_unit),
    )


def location_from_model(model: LocationModel) -> Location:
    return Location(id=model.id, name=model.name)


def booking_from_model(model: BookingModel) -> Booking:
    return Booking(sku=model.sku, quantity=int(model.quantity or 0), note=model.note or "")


def audit_from_model(model: AuditModel) -> AuditEntry:
    return AuditEntry(
        id=model.id,
        timestamp=as_utc(model.timestamp),
        kind=MovementKind(model.kind),
        sku=model.sku,
        location_id=model.location_id,
        from_location_id=model.from_location_id,
        to_location_id=model.to_location_id,
        quantity=int(model.quantity),
        reason=model.reason,
        note=model.note,
        actor_id=model.actor_id,
        item_name=model.item_name_cached,
        location_name=model.location_name_cached,
        from_location_name=model.from_location_name_cached,
        to_location_name=model.to_location_name_cached,
    )


def audit_to_model(entry: AuditEntry) -> AuditModel:
    return AuditModel(
        id=entry.id,
        timestamp=entry.timestamp,
        kind=entry.kind.value,
        sku=entry.sku,
        location_id=entry.location_id,
        from_location_id=entry.from_location_id,
        to_location_id=entry.to_location_id,
        quantity=entry.quantity,
        reason=entry.reason,
        note=entry.note,
        actor_id=entry.actor_id,
        item_name_cached=entry.item_name or entry.sku,
        location_name_cached=entry.location_name,
        from_location_name_cached=entry.from_location_name,
        to_location_name_cached=entry.to_location_name,
    )


# --- Domain record -> response / export dict ------------------------------------


def item_to_schema(item: Item) -> Dict:
    return {
        "sku": item.sku,
        "name": item.name,
        "selling_price_minor_units": item.selling_price_minor_units,
        "price": item.selling_price_minor_units / 100.0,
        "quantity_unit": item.quantity_unit.value,
    }


def location_to_schema(location: Location) -> Dict:
    return {"id": location.id, "name": location.name}


def audit_to_schema(entry: AuditEntry) -> Dict:
    return {
        "id": entry.id,
        "timestamp": entry.timestamp.isoformat() if entry.timestamp else None,
        "kind": entry.kind.value,
        "sku": entry.sku,
        "location_id": entry.location_id,
        "from_location_id": entry.from_location_id,
        "to_location_id": entry.to_location_id,
        "quantity": entry.quantity,
        "reason": entry.reason,
        "note": entry.note,
        "actor_id": entry.actor_id,
        "item_name": entry.item_name,
        "location_name": entry.location_name,
        "from_location_name": entry.from_location_name,
        "to_location_name": entry.to_location_name,
    }
