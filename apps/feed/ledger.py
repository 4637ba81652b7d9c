"""
Inventory ledger: per-type stock with a per-feed-type breakdown for FEED.

add_stock / deduct_stock raise FeedInventoryError subclasses and are meant to
be called inside a caller's transaction. add_to_inventory /
deduct_from_inventory are the public entry points and return
{'success': ..., 'data' | 'error': ...} dicts.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.db import IntegrityError, transaction

from .exceptions import FeedInventoryError, InsufficientStock, InventoryNotFound, UnknownFeedType
from .models import FEED_TYPES, Inventory

logger = logging.getLogger(__name__)

ZERO = Decimal('0')

INVENTORY_TYPES = frozenset(code for code, _ in Inventory.TYPE_CHOICES)

# Scalar counter kept alongside quantity for each type
COUNTER_FIELDS = {
    Inventory.EGG: 'egg_count',
    Inventory.BROILER: 'broiler_count',
    Inventory.MANURE: 'manure_weight',
}

DETAIL_FIELDS = {
    Inventory.FEED: 'feed_details',
    Inventory.MEDICINE: 'medicine_details',
    Inventory.OTHER: 'other_details',
}


def to_decimal(value):
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise FeedInventoryError(f"Invalid amount: {value}")


def format_amount(value):
    return format(to_decimal(value).quantize(Decimal('0.01')), 'f')


def _check_type(inventory_type):
    if inventory_type not in INVENTORY_TYPES:
        raise FeedInventoryError(f"Unknown inventory type: {inventory_type}")


def _positive(amount):
    amount = to_decimal(amount)
    if amount <= 0:
        raise FeedInventoryError("Amount must be greater than zero")
    return amount


def clean_feed_details(details):
    """Validate feed_details keys and amounts, returning {feed_type: Decimal}."""
    cleaned = {}
    for feed_type, amount in (details or {}).items():
        if feed_type not in FEED_TYPES:
            raise UnknownFeedType(f"Unknown feed type: {feed_type}")
        amount = to_decimal(amount)
        if amount < 0:
            raise FeedInventoryError(f"Amount for {feed_type} cannot be negative")
        cleaned[feed_type] = amount
    return cleaned


def _counter_value(inventory, field):
    value = getattr(inventory, field)
    return to_decimal(value) if value is not None else ZERO


def _set_counter(inventory, field, value):
    # egg and broiler counters are whole birds/eggs
    if field == 'manure_weight':
        setattr(inventory, field, value)
    else:
        setattr(inventory, field, int(value))


def get_active_inventory(inventory_type, lock=False):
    queryset = Inventory.objects.filter(type=inventory_type, is_active=True)
    if lock:
        queryset = queryset.select_for_update()
    return queryset.first()


def _create_inventory(inventory_type, amount, details):
    inventory = Inventory(
        type=inventory_type,
        name=f"{inventory_type.lower()} inventory",
        quantity=amount,
        unit='pieces' if inventory_type == Inventory.EGG else 'kg',
    )
    if inventory_type in COUNTER_FIELDS:
        _set_counter(inventory, COUNTER_FIELDS[inventory_type], amount)
    elif inventory_type == Inventory.FEED:
        inventory.set_feed_details(details)
    elif details is not None:
        setattr(inventory, DETAIL_FIELDS[inventory_type], details)
    inventory.save()
    return inventory


def _apply_addition(inventory, amount, details):
    inventory.quantity = to_decimal(inventory.quantity) + amount

    if inventory.type in COUNTER_FIELDS:
        field = COUNTER_FIELDS[inventory.type]
        _set_counter(inventory, field, _counter_value(inventory, field) + amount)
    elif inventory.type == Inventory.FEED and details:
        balances = inventory.get_feed_details()
        for feed_type, added in details.items():
            balances[feed_type] = balances.get(feed_type, ZERO) + added
        inventory.set_feed_details(balances)

    inventory.save()
    return inventory


def add_stock(inventory_type, amount, details=None):
    """
    Add stock to the active row of inventory_type, creating it when absent.
    For FEED, details ({feed_type: kg}) are merged into feed_details by summing.
    """
    _check_type(inventory_type)
    amount = _positive(amount)
    if inventory_type == Inventory.FEED:
        details = clean_feed_details(details)

    with transaction.atomic():
        inventory = get_active_inventory(inventory_type, lock=True)
        if inventory is not None:
            return _apply_addition(inventory, amount, details)

        try:
            with transaction.atomic():
                inventory = _create_inventory(inventory_type, amount, details)
        except IntegrityError:
            # Another request created the row first
            inventory = get_active_inventory(inventory_type, lock=True)
            if inventory is None:
                raise
            return _apply_addition(inventory, amount, details)

    logger.info(f"Created {inventory_type} inventory with {format_amount(amount)} {inventory.unit}")
    return inventory


def deduct_stock(inventory_type, amount, details=None):
    """
    Deduct stock from the active row of inventory_type.

    The availability check and the write happen under the same row lock.
    With FEED details every requested feed type balance is checked; otherwise
    the aggregate quantity is. All counters are clamped at zero.
    """
    _check_type(inventory_type)
    amount = _positive(amount)
    if inventory_type == Inventory.FEED:
        details = clean_feed_details(details)

    with transaction.atomic():
        inventory = get_active_inventory(inventory_type, lock=True)
        if inventory is None:
            raise InventoryNotFound(f"No {inventory_type.lower()} inventory found")

        quantity = to_decimal(inventory.quantity)

        if inventory_type == Inventory.FEED and details:
            balances = inventory.get_feed_details()
            for feed_type, required in details.items():
                available = balances.get(feed_type, ZERO)
                if available < required:
                    raise InsufficientStock(
                        f"Insufficient {feed_type} inventory. "
                        f"Available: {format_amount(available)}, Required: {format_amount(required)}"
                    )
            for feed_type, required in details.items():
                balances[feed_type] = max(ZERO, balances.get(feed_type, ZERO) - required)
            inventory.set_feed_details(balances)
        elif quantity < amount:
            raise InsufficientStock(
                f"Insufficient {inventory_type.lower()} inventory. "
                f"Available: {format_amount(quantity)}, Required: {format_amount(amount)}"
            )

        inventory.quantity = max(ZERO, quantity - amount)
        if inventory_type in COUNTER_FIELDS:
            field = COUNTER_FIELDS[inventory_type]
            _set_counter(inventory, field, max(ZERO, _counter_value(inventory, field) - amount))

        inventory.save()
        return inventory


def add_to_inventory(inventory_type, amount, details=None):
    try:
        inventory = add_stock(inventory_type, amount, details)
        return {'success': True, 'data': inventory}
    except FeedInventoryError as e:
        return {'success': False, 'error': str(e)}
    except Exception:
        logger.exception(f"Error adding to {inventory_type} inventory")
        return {'success': False, 'error': "Failed to add to inventory"}


def deduct_from_inventory(inventory_type, amount, details=None):
    try:
        inventory = deduct_stock(inventory_type, amount, details)
        return {'success': True, 'data': inventory}
    except FeedInventoryError as e:
        logger.warning(f"Inventory deduction rejected: {e}")
        return {'success': False, 'error': str(e)}
    except Exception:
        logger.exception(f"Error deducting from {inventory_type} inventory")
        return {'success': False, 'error': "Failed to deduct from inventory"}
