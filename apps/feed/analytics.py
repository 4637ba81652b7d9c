"""
Read-only feed analytics: consumption statistics, stock counts and
days-until-stockout projections built from FeedUsage and the FEED ledger row.
"""
import logging
from collections import OrderedDict
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db.models import Sum
from django.utils import timezone

from .ledger import get_active_inventory, to_decimal
from .models import FEED_TYPE_LABELS, FeedUsage, Inventory

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
CENT = Decimal('0.01')


def _threshold(value=None):
    if value is None:
        value = settings.FEED_LOW_STOCK_THRESHOLD_KG
    return to_decimal(value)


def _feed_balances():
    inventory = get_active_inventory(Inventory.FEED)
    if inventory is None:
        return {}
    return inventory.get_feed_details()


def _usage_by_feed_type(start_date, end_date):
    rows = (
        FeedUsage.objects
        .filter(date__gte=start_date, date__lte=end_date)
        .order_by()
        .values('feed_type')
        .annotate(total=Sum('amount_used'))
    )
    return {row['feed_type']: row['total'] or ZERO for row in rows}


def get_feed_consumption_analytics(start_date=None, end_date=None, flock_id=None):
    """Usage and cost grouped by feed type, with an overall summary."""
    records = FeedUsage.objects.all()
    if start_date:
        records = records.filter(date__gte=start_date)
    if end_date:
        records = records.filter(date__lte=end_date)
    if flock_id:
        records = records.filter(flock_id=flock_id)
    records = records.order_by('date', 'created_at')

    groups = OrderedDict()
    total_usage = ZERO
    total_cost = ZERO
    flock_ids = set()
    first_date = last_date = None

    for record in records:
        group = groups.setdefault(record.feed_type, {
            'feed_type': record.feed_type,
            'total_usage': ZERO,
            'total_cost': ZERO,
            'record_count': 0,
            'flocks': set(),
            'daily_usage': {},
        })
        group['total_usage'] += record.amount_used
        group['total_cost'] += record.cost or ZERO
        group['record_count'] += 1
        group['flocks'].add(str(record.flock_id))
        day = record.date.isoformat()
        group['daily_usage'][day] = group['daily_usage'].get(day, ZERO) + record.amount_used

        total_usage += record.amount_used
        total_cost += record.cost or ZERO
        flock_ids.add(record.flock_id)
        first_date = first_date or record.date
        last_date = record.date

    analytics = []
    for group in groups.values():
        days_with_usage = len(group['daily_usage'])
        group['flocks'] = sorted(group['flocks'])
        group['flock_count'] = len(group['flocks'])
        group['average_daily_usage'] = (
            (group['total_usage'] / days_with_usage).quantize(CENT) if days_with_usage else ZERO
        )
        analytics.append(group)

    return {
        'analytics': analytics,
        'summary': {
            'total_usage': total_usage,
            'total_cost': total_cost,
            'average_cost_per_kg': (total_cost / total_usage).quantize(CENT) if total_usage else ZERO,
            'total_records': sum(group['record_count'] for group in analytics),
            'unique_flocks': len(flock_ids),
            'date_range': {
                'start': start_date or first_date,
                'end': end_date or last_date,
            },
        },
    }


def project_stock(current_stock, average_daily_usage, days, threshold, today):
    """
    Day-by-day projection of a single balance.
    Day d (1..days) holds current_stock - average_daily_usage * d.
    """
    projections = []
    days_until_out = days_until_low = None
    has_usage = average_daily_usage > 0

    for day in range(1, days + 1):
        remaining = current_stock - average_daily_usage * day
        is_out = remaining <= 0
        projections.append({
            'day': day,
            'date': today + timedelta(days=day),
            'projected_stock': max(ZERO, remaining).quantize(CENT),
            'daily_usage': average_daily_usage.quantize(CENT),
            'is_low_stock': ZERO < remaining < threshold,
            'is_out_of_stock': is_out,
        })
        if not has_usage:
            continue
        if days_until_low is None and remaining < threshold:
            days_until_low = day
        if days_until_out is None and is_out:
            days_until_out = day

    return {
        'projections': projections,
        'days_until_out_of_stock': days_until_out,
        'days_until_low_stock': days_until_low,
        'out_of_stock_date': today + timedelta(days=days_until_out) if days_until_out else None,
        'low_stock_date': today + timedelta(days=days_until_low) if days_until_low else None,
    }


def get_inventory_projection(feed_type=None, days=None, low_stock_threshold=None, window_days=None, today=None):
    """
    Project every feed type balance forward using the average daily usage
    over the trailing window.
    """
    days = days or settings.FEED_PROJECTION_DAYS
    window_days = window_days or settings.FEED_USAGE_WINDOW_DAYS
    threshold = _threshold(low_stock_threshold)
    today = today or timezone.localdate()

    balances = _feed_balances()
    if feed_type:
        balances = {key: value for key, value in balances.items() if key == feed_type}

    usage = _usage_by_feed_type(today - timedelta(days=window_days), today)

    results = []
    for key, current_stock in balances.items():
        average_daily_usage = to_decimal(usage.get(key, ZERO)) / window_days
        projection = project_stock(current_stock, average_daily_usage, days, threshold, today)
        results.append({
            'feed_type': key,
            'feed_type_display': FEED_TYPE_LABELS.get(key, key),
            'current_stock': current_stock,
            'average_daily_usage': average_daily_usage.quantize(CENT),
            'has_usage_data': average_daily_usage > 0,
            'low_stock_threshold': threshold,
            **projection,
        })
    return results


def get_inventory_counts():
    """Aggregate stock per inventory type plus the feed type breakdown."""
    counts = {
        'eggs': 0,
        'feed': ZERO,
        'medicine': ZERO,
        'broilers': 0,
        'manure': ZERO,
        'other': ZERO,
    }

    rows = (
        Inventory.objects
        .filter(is_active=True)
        .order_by()
        .values('type')
        .annotate(
            quantity=Sum('quantity'),
            egg_count=Sum('egg_count'),
            broiler_count=Sum('broiler_count'),
            manure_weight=Sum('manure_weight'),
        )
    )
    for row in rows:
        if row['type'] == Inventory.EGG:
            counts['eggs'] += row['egg_count'] or 0
        elif row['type'] == Inventory.FEED:
            counts['feed'] += row['quantity'] or ZERO
        elif row['type'] == Inventory.MEDICINE:
            counts['medicine'] += row['quantity'] or ZERO
        elif row['type'] == Inventory.BROILER:
            counts['broilers'] += row['broiler_count'] or 0
        elif row['type'] == Inventory.MANURE:
            counts['manure'] += row['manure_weight'] or ZERO
        elif row['type'] == Inventory.OTHER:
            counts['other'] += row['quantity'] or ZERO

    feed_breakdown = dict(_feed_balances())
    feed_breakdown['total'] = sum(feed_breakdown.values(), ZERO)
    counts['feed_breakdown'] = feed_breakdown
    return counts


def get_inventory_with_usage(window_days=None, low_stock_threshold=None, today=None):
    """Each feed type balance with its recent usage rate and days of stock left."""
    window_days = window_days or settings.FEED_USAGE_WINDOW_DAYS
    threshold = _threshold(low_stock_threshold)
    today = today or timezone.localdate()

    usage = _usage_by_feed_type(today - timedelta(days=window_days), today)

    results = []
    for feed_type, quantity in _feed_balances().items():
        total_usage = to_decimal(usage.get(feed_type, ZERO))
        average_daily_usage = total_usage / window_days
        results.append({
            'feed_type': feed_type,
            'feed_type_display': FEED_TYPE_LABELS.get(feed_type, feed_type),
            'quantity': quantity,
            'total_usage': total_usage,
            'window_days': window_days,
            'average_daily_usage': average_daily_usage.quantize(CENT),
            'days_remaining': (
                (quantity / average_daily_usage).quantize(Decimal('0.1')) if average_daily_usage > 0 else None
            ),
            'is_low_stock': quantity <= threshold,
        })
    return results


def get_low_stock_alerts(threshold=None):
    """Feed types at or below the threshold, lowest balance first."""
    threshold = _threshold(threshold)
    alerts = [
        {
            'feed_type': feed_type,
            'feed_type_display': FEED_TYPE_LABELS.get(feed_type, feed_type),
            'quantity': quantity,
            'threshold': threshold,
            'is_out_of_stock': quantity <= 0,
        }
        for feed_type, quantity in _feed_balances().items()
        if quantity <= threshold
    ]
    alerts.sort(key=lambda alert: alert['quantity'])
    if alerts:
        logger.info(f"{len(alerts)} feed types at or below {threshold} kg")
    return alerts
