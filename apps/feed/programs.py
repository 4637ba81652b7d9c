"""
Feed recommendation calculator.

A flock's age in weeks is derived from its arrival date and age on arrival,
then matched against the active FeedProgram rows. Ages beyond the last
configured week fall back to the last program row.
"""
import logging
from collections import OrderedDict
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db.models import Sum
from django.utils import timezone

from apps.flocks.models import Flock

from .models import FeedProgram, FeedUsage

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
KG = Decimal('0.01')


def calculate_flock_age(flock, on_date=None):
    """Age of the flock in whole weeks on on_date (today by default)."""
    on_date = on_date or timezone.localdate()
    days_since_arrival = (on_date - flock.arrival_date).days
    total_age_in_days = (flock.age_in_days or 0) + days_since_arrival
    return max(0, total_age_in_days // 7)


def get_flock(flock_id):
    try:
        return Flock.objects.get(pk=flock_id)
    except (Flock.DoesNotExist, ValidationError, ValueError):
        return None


def load_programs():
    """Active programs keyed by age_in_weeks."""
    return {
        program.age_in_weeks: program
        for program in FeedProgram.objects.filter(is_active=True).order_by('age_in_weeks')
    }


def resolve_program(programs_by_week, age_in_weeks):
    """
    Return (program, is_fallback) for age_in_weeks.

    An exact week match wins. Otherwise the program with the highest
    age_in_weeks is used. Returns (None, False) when there are no programs.
    """
    program = programs_by_week.get(age_in_weeks)
    if program is not None:
        return program, False
    if not programs_by_week:
        return None, False
    return programs_by_week[max(programs_by_week)], True


def daily_amount_kg(gram_per_hen, bird_count):
    return (Decimal(gram_per_hen) * bird_count / 1000).quantize(KG)


def build_recommendation(flock, programs_by_week, on_date=None):
    age_in_weeks = calculate_flock_age(flock, on_date)
    program, is_fallback = resolve_program(programs_by_week, age_in_weeks)
    if program is None:
        return None

    recommendation = {
        'flock_id': str(flock.id),
        'batch_code': flock.batch_code,
        'current_count': flock.current_count,
        'feed_type': program.feed_type,
        'gram_per_hen': program.gram_per_hen,
        'total_amount_kg': daily_amount_kg(program.gram_per_hen, flock.current_count),
        'age_in_weeks': age_in_weeks,
        'age_in_days': program.age_in_days,
        'is_transition_week': False,
        'next_feed_type': None,
        'next_transition_week': None,
    }

    if is_fallback:
        recommendation['age_in_days'] = f"{age_in_weeks * 7}-{(age_in_weeks + 1) * 7 - 1}"
        return recommendation

    next_program = programs_by_week.get(age_in_weeks + 1)
    if next_program is not None and next_program.feed_type != program.feed_type:
        recommendation.update({
            'is_transition_week': True,
            'next_feed_type': next_program.feed_type,
            'next_transition_week': age_in_weeks + 1,
        })

    return recommendation


def get_feed_recommendation(flock_id, on_date=None):
    """
    Recommended feed type and daily ration for a single flock.
    Returns None when the flock is missing or no program is configured.
    """
    flock = get_flock(flock_id)
    if flock is None:
        return None

    programs_by_week = load_programs()
    if not programs_by_week:
        logger.warning("No feed program configured")
        return None

    return build_recommendation(flock, programs_by_week, on_date)


def get_all_feed_recommendations(on_date=None):
    """
    Recommendations for every flock that still has birds, as a list of
    {"flock": {...}, "recommendation": {...}} entries ordered by batch code.
    """
    programs_by_week = load_programs()
    if not programs_by_week:
        logger.warning("No feed program configured")
        return []

    recommendations = []
    for flock in Flock.objects.filter(current_count__gt=0).order_by('batch_code'):
        recommendation = build_recommendation(flock, programs_by_week, on_date)
        if recommendation is not None:
            recommendations.append({
                'flock': {
                    'id': str(flock.id),
                    'batch_code': flock.batch_code,
                    'breed': flock.breed,
                    'status': flock.status,
                    'current_count': flock.current_count,
                },
                'recommendation': recommendation,
            })
    return recommendations


def _group_by_feed_type(entries, days):
    groups = OrderedDict()
    for entry in entries:
        rec = entry['recommendation']
        amount = rec['total_amount_kg'] * days
        group = groups.get(rec['feed_type'])
        if group is None:
            group = groups[rec['feed_type']] = {
                'feed_type': rec['feed_type'],
                'total_amount_kg': ZERO,
                'flocks_count': 0,
                'gram_per_hen': rec['gram_per_hen'],
                'age_in_weeks': rec['age_in_weeks'],
                'age_in_days': rec['age_in_days'],
                'flocks': [],
            }
        group['total_amount_kg'] += amount
        group['flocks_count'] += 1
        group['flocks'].append({
            'flock_id': rec['flock_id'],
            'batch_code': rec['batch_code'],
            'amount_kg': amount,
            'current_count': rec['current_count'],
            'age_in_weeks': rec['age_in_weeks'],
            'gram_per_hen': rec['gram_per_hen'],
        })
    return list(groups.values())


def get_weekly_feed_requirements(on_date=None):
    return _group_by_feed_type(get_all_feed_recommendations(on_date), 7)


def get_daily_feed_requirements(on_date=None):
    weekly = get_weekly_feed_requirements(on_date)
    for group in weekly:
        group['total_amount_kg'] = (group['total_amount_kg'] / 7).quantize(KG)
        for entry in group['flocks']:
            entry['amount_kg'] = (entry['amount_kg'] / 7).quantize(KG)
    return weekly


def compliance_percentage(recommended, actual):
    if recommended <= 0:
        return Decimal('100')
    deviation = abs(actual - recommended) / recommended * 100
    return max(ZERO, Decimal('100') - deviation).quantize(KG)


def get_feed_compliance(flock_id, days=None, today=None):
    """
    Compare recommended against recorded feed for each of the last `days` days.
    The window starts `days` days before today and does not include today.
    """
    days = days or settings.FEED_COMPLIANCE_DAYS
    today = today or timezone.localdate()

    flock = get_flock(flock_id)
    if flock is None:
        return None

    start_date = today - timedelta(days=days)
    programs_by_week = load_programs()

    usage_by_date = dict(
        FeedUsage.objects
        .filter(flock=flock, date__gte=start_date, date__lt=today)
        .order_by()
        .values('date')
        .annotate(total=Sum('amount_used'))
        .values_list('date', 'total')
    )

    records = []
    recommended_total = ZERO
    actual_total = ZERO

    for i in range(days):
        day = start_date + timedelta(days=i)
        program, _ = resolve_program(programs_by_week, calculate_flock_age(flock, day))
        recommended = daily_amount_kg(program.gram_per_hen, flock.current_count) if program else ZERO
        actual = usage_by_date.get(day) or ZERO

        records.append({
            'date': day,
            'feed_type': program.feed_type if program else None,
            'recommended': recommended,
            'actual': actual,
            'variance': actual - recommended,
        })
        recommended_total += recommended
        actual_total += actual

    return {
        'flock_id': str(flock.id),
        'batch_code': flock.batch_code,
        'days': days,
        'start_date': start_date,
        'end_date': today,
        'recommended_total': recommended_total,
        'actual_total': actual_total,
        'compliance': compliance_percentage(recommended_total, actual_total),
        'variance': actual_total - recommended_total,
        'records': records,
    }
