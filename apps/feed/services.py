"""
Feed usage recorder and stock receipts.

Every operation that touches both a record and the FEED ledger runs in a
single transaction; a ledger failure raised inside it rolls the record
change back.
"""
import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from .exceptions import FeedInventoryError, FeedProgramNotFound, UsageNotFound
from .ledger import add_stock, deduct_stock, to_decimal
from .models import FEED_TYPES, FeedPurchase, FeedUsage, Inventory
from .programs import get_feed_recommendation, get_flock

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def _amount_used(value):
    # Row and ledger both hold two decimal places
    amount = to_decimal(value).quantize(CENT)
    if amount <= 0:
        raise FeedInventoryError("Amount used must be greater than zero")
    return amount


def _get_usage(usage_id, lock=False):
    queryset = FeedUsage.objects.all()
    if lock:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(pk=usage_id)
    except (FeedUsage.DoesNotExist, ValidationError, ValueError):
        raise UsageNotFound("Usage record not found")


def latest_cost_per_kg(feed_type):
    """Cost per kg of the most recent priced purchase of feed_type."""
    purchase = (
        FeedPurchase.objects
        .filter(feed_type=feed_type, total_cost__isnull=False)
        .order_by('-purchase_date', '-created_at')
        .first()
    )
    return purchase.cost_per_kg if purchase else None


def create_feed_usage(data, recorded_by=None):
    """
    Record feed consumed by a flock and deduct it from the FEED ledger.

    The feed type is taken from the flock's program recommendation for the
    usage date and stored on the record.
    """
    try:
        flock = get_flock(data.get('flock_id'))
        if flock is None:
            return {'success': False, 'error': "Flock not found"}

        amount = _amount_used(data.get('amount_used'))
        usage_date = data.get('date') or timezone.localdate()

        recommendation = get_feed_recommendation(flock.id, on_date=usage_date)
        if recommendation is None:
            raise FeedProgramNotFound("No feed program found for this flock's age")
        feed_type = recommendation['feed_type']

        with transaction.atomic():
            usage = FeedUsage.objects.create(
                flock=flock,
                feed_type=feed_type,
                date=usage_date,
                amount_used=amount,
                unit='KG',
                unit_cost=latest_cost_per_kg(feed_type),
                notes=data.get('notes'),
                recorded_by=recorded_by,
            )
            deduct_stock(Inventory.FEED, amount, {feed_type: amount})

        logger.info(f"Recorded {amount} kg {feed_type} for flock {flock.batch_code}")
        return {'success': True, 'data': usage}

    except FeedInventoryError as e:
        logger.warning(f"Feed usage rejected: {e}")
        return {'success': False, 'error': str(e)}
    except Exception:
        logger.exception("Error creating feed usage")
        return {'success': False, 'error': "Failed to create feed usage record"}


def update_feed_usage(usage_id, data):
    """
    Update a usage record. A change in amount_used is reconciled against the
    ledger for the feed type captured on the record.
    """
    try:
        with transaction.atomic():
            usage = _get_usage(usage_id, lock=True)
            original_amount = usage.amount_used

            if data.get('flock_id') is not None:
                flock = get_flock(data['flock_id'])
                if flock is None:
                    raise FeedInventoryError("Flock not found")
                usage.flock = flock
            if data.get('date') is not None:
                usage.date = data['date']
            if 'notes' in data:
                usage.notes = data['notes']
            if data.get('amount_used') is not None:
                usage.amount_used = _amount_used(data['amount_used'])

            usage.save()

            difference = usage.amount_used - original_amount
            if difference > 0:
                deduct_stock(Inventory.FEED, difference, {usage.feed_type: difference})
            elif difference < 0:
                add_stock(Inventory.FEED, -difference, {usage.feed_type: -difference})

        return {'success': True, 'data': usage}

    except FeedInventoryError as e:
        logger.warning(f"Feed usage update rejected: {e}")
        return {'success': False, 'error': str(e)}
    except Exception:
        logger.exception(f"Error updating feed usage {usage_id}")
        return {'success': False, 'error': "Failed to update feed usage record"}


def delete_feed_usage(usage_id):
    """Delete a usage record and return its amount to the FEED ledger."""
    try:
        with transaction.atomic():
            usage = _get_usage(usage_id, lock=True)
            amount, feed_type = usage.amount_used, usage.feed_type
            usage.delete()
            add_stock(Inventory.FEED, amount, {feed_type: amount})

        return {'success': True}

    except FeedInventoryError as e:
        return {'success': False, 'error': str(e)}
    except Exception:
        logger.exception(f"Error deleting feed usage {usage_id}")
        return {'success': False, 'error': "Failed to delete feed usage record"}


def list_feed_usage(flock_id=None, start_date=None, end_date=None):
    queryset = FeedUsage.objects.select_related('flock', 'recorded_by')
    if flock_id:
        queryset = queryset.filter(flock_id=flock_id)
    if start_date:
        queryset = queryset.filter(date__gte=start_date)
    if end_date:
        queryset = queryset.filter(date__lte=end_date)
    return queryset.order_by('-date', '-created_at')


def _purchase_feed_type(value):
    if value not in FEED_TYPES:
        raise FeedInventoryError(f"Unknown feed type: {value}")
    return value


def _purchase_unit(value):
    if value not in FeedPurchase.KG_PER_UNIT:
        raise FeedInventoryError(f"Unknown unit: {value}")
    return value


def _purchase_quantity(value):
    quantity = to_decimal(value).quantize(CENT)
    if quantity <= 0:
        raise FeedInventoryError("Quantity must be greater than zero")
    return quantity


def _get_purchase(purchase_id):
    try:
        return FeedPurchase.objects.select_for_update().get(pk=purchase_id)
    except (FeedPurchase.DoesNotExist, ValidationError, ValueError):
        raise FeedInventoryError("Purchase record not found")


def record_feed_purchase(data, recorded_by=None):
    """Store a stock receipt and add its kilograms to the FEED ledger."""
    try:
        feed_type = _purchase_feed_type(data.get('feed_type'))
        unit = _purchase_unit(data.get('unit') or FeedPurchase.KG)
        quantity = _purchase_quantity(data.get('quantity'))
        cost_per_unit = data.get('cost_per_unit')

        with transaction.atomic():
            purchase = FeedPurchase(
                feed_type=feed_type,
                quantity=quantity,
                unit=unit,
                cost_per_unit=to_decimal(cost_per_unit) if cost_per_unit is not None else None,
                supplier=data.get('supplier'),
                purchase_date=data.get('purchase_date') or timezone.localdate(),
                notes=data.get('notes'),
                recorded_by=recorded_by,
            )
            purchase.save()
            add_stock(Inventory.FEED, purchase.quantity_kg, {feed_type: purchase.quantity_kg})

        logger.info(f"Received {purchase.quantity_kg} kg {feed_type}")
        return {'success': True, 'data': purchase}

    except FeedInventoryError as e:
        return {'success': False, 'error': str(e)}
    except Exception:
        logger.exception("Error recording feed purchase")
        return {'success': False, 'error': "Failed to record feed purchase"}


def update_feed_purchase(purchase_id, data):
    """
    Correct a stock receipt. quantity_kg and total_cost are recomputed and
    any change in kilograms, or a change of feed type, is moved through the
    FEED ledger in the same transaction.
    """
    try:
        with transaction.atomic():
            purchase = _get_purchase(purchase_id)
            old_feed_type, old_kg = purchase.feed_type, Decimal(purchase.quantity_kg)

            if data.get('feed_type') is not None:
                purchase.feed_type = _purchase_feed_type(data['feed_type'])
            if data.get('unit') is not None:
                purchase.unit = _purchase_unit(data['unit'])
            if data.get('quantity') is not None:
                purchase.quantity = _purchase_quantity(data['quantity'])
            if 'cost_per_unit' in data:
                cost_per_unit = data['cost_per_unit']
                purchase.cost_per_unit = to_decimal(cost_per_unit) if cost_per_unit is not None else None
                if cost_per_unit is None:
                    purchase.total_cost = None
            for field in ('supplier', 'purchase_date', 'notes'):
                if field in data:
                    setattr(purchase, field, data[field])

            purchase.save()
            new_kg = Decimal(purchase.quantity_kg)

            if purchase.feed_type != old_feed_type:
                deduct_stock(Inventory.FEED, old_kg, {old_feed_type: old_kg})
                add_stock(Inventory.FEED, new_kg, {purchase.feed_type: new_kg})
            elif new_kg > old_kg:
                difference = new_kg - old_kg
                add_stock(Inventory.FEED, difference, {purchase.feed_type: difference})
            elif new_kg < old_kg:
                difference = old_kg - new_kg
                deduct_stock(Inventory.FEED, difference, {purchase.feed_type: difference})

        return {'success': True, 'data': purchase}

    except FeedInventoryError as e:
        logger.warning(f"Feed purchase update rejected: {e}")
        return {'success': False, 'error': str(e)}
    except Exception:
        logger.exception(f"Error updating feed purchase {purchase_id}")
        return {'success': False, 'error': "Failed to update feed purchase"}


def delete_feed_purchase(purchase_id):
    """Remove a stock receipt, taking its kilograms back out of the ledger."""
    try:
        with transaction.atomic():
            purchase = _get_purchase(purchase_id)
            quantity_kg, feed_type = Decimal(purchase.quantity_kg), purchase.feed_type
            purchase.delete()
            deduct_stock(Inventory.FEED, quantity_kg, {feed_type: quantity_kg})

        return {'success': True}

    except FeedInventoryError as e:
        return {'success': False, 'error': str(e)}
    except Exception:
        logger.exception(f"Error deleting feed purchase {purchase_id}")
        return {'success': False, 'error': "Failed to delete feed purchase"}
