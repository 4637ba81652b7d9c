from datetime import date
from decimal import Decimal

from apps.flocks.models import Flock

from ..ledger import add_stock
from ..models import FeedProgram, Inventory

USAGE_DATE = date(2024, 5, 10)


def create_flock(batch_code='B-001', age_in_weeks=18, on_date=USAGE_DATE, count=100, **kwargs):
    """A flock that is exactly age_in_weeks old on on_date."""
    return Flock.objects.create(
        batch_code=batch_code,
        arrival_date=on_date,
        age_in_days=age_in_weeks * 7,
        initial_count=count,
        current_count=count,
        **kwargs
    )


def create_program(age_in_weeks, feed_type, gram_per_hen, **kwargs):
    return FeedProgram.objects.create(
        age_in_weeks=age_in_weeks,
        age_in_days=f"{age_in_weeks * 7}-{age_in_weeks * 7 + 6}",
        feed_type=feed_type,
        gram_per_hen=Decimal(str(gram_per_hen)),
        **kwargs
    )


def stock_feed(feed_type, amount):
    amount = Decimal(str(amount))
    return add_stock(Inventory.FEED, amount, {feed_type: amount})


def feed_balance(feed_type):
    inventory = Inventory.objects.get(type=Inventory.FEED, is_active=True)
    return inventory.feed_balance(feed_type)
