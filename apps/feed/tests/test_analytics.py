from datetime import timedelta
from decimal import Decimal

from django.test import TestCase, override_settings

from ..analytics import (
    get_feed_consumption_analytics, get_inventory_counts, get_inventory_projection, get_inventory_with_usage,
    get_low_stock_alerts, project_stock
)
from ..ledger import add_stock
from ..models import FeedUsage, Inventory
from .utils import USAGE_DATE, create_flock, stock_feed

TODAY = USAGE_DATE


class AnalyticsTestCase(TestCase):
    def setUp(self):
        self.flock = create_flock('B-001')
        self.other_flock = create_flock('B-002')

    def record(self, feed_type, amount, days_ago=1, flock=None, cost=None):
        return FeedUsage.objects.create(
            flock=flock or self.flock,
            feed_type=feed_type,
            date=TODAY - timedelta(days=days_ago),
            amount_used=Decimal(str(amount)),
            unit_cost=Decimal(str(cost)) if cost is not None else None,
        )


class ConsumptionAnalyticsTests(AnalyticsTestCase):
    def setUp(self):
        super().setUp()
        self.record('LAYER', 10, days_ago=3, cost=30)
        self.record('LAYER', 20, days_ago=3, flock=self.other_flock, cost=30)
        self.record('LAYER', 30, days_ago=1)
        self.record('REARING', 5, days_ago=2, cost=40)

    def test_grouped_by_feed_type(self):
        result = get_feed_consumption_analytics()
        analytics = {item['feed_type']: item for item in result['analytics']}

        layer = analytics['LAYER']
        self.assertEqual(layer['total_usage'], Decimal('60'))
        self.assertEqual(layer['record_count'], 3)
        self.assertEqual(layer['flock_count'], 2)
        self.assertEqual(layer['total_cost'], Decimal('900'))
        # Two distinct days with usage
        self.assertEqual(layer['average_daily_usage'], Decimal('30.00'))
        self.assertEqual(analytics['REARING']['total_usage'], Decimal('5'))

    def test_summary(self):
        summary = get_feed_consumption_analytics()['summary']

        self.assertEqual(summary['total_usage'], Decimal('65'))
        self.assertEqual(summary['total_records'], 4)
        self.assertEqual(summary['unique_flocks'], 2)
        self.assertEqual(summary['total_cost'], Decimal('1100'))
        self.assertEqual(summary['average_cost_per_kg'], Decimal('16.92'))
        self.assertEqual(summary['date_range'], {'start': TODAY - timedelta(days=3), 'end': TODAY - timedelta(days=1)})

    def test_filters(self):
        result = get_feed_consumption_analytics(start_date=TODAY - timedelta(days=2), flock_id=self.flock.id)

        self.assertEqual(result['summary']['total_usage'], Decimal('35'))
        self.assertEqual(result['summary']['date_range']['start'], TODAY - timedelta(days=2))

    def test_empty(self):
        FeedUsage.objects.all().delete()

        result = get_feed_consumption_analytics()

        self.assertEqual(result['analytics'], [])
        self.assertEqual(result['summary']['total_usage'], Decimal('0'))
        self.assertEqual(result['summary']['date_range'], {'start': None, 'end': None})


class ProjectStockTests(TestCase):
    def test_days_until_thresholds(self):
        result = project_stock(Decimal('100'), Decimal('2'), 60, Decimal('50'), TODAY)

        self.assertEqual(result['days_until_low_stock'], 26)
        self.assertEqual(result['days_until_out_of_stock'], 50)
        self.assertEqual(result['out_of_stock_date'], TODAY + timedelta(days=50))

        day_26 = result['projections'][25]
        self.assertEqual(day_26['projected_stock'], Decimal('48.00'))
        self.assertTrue(day_26['is_low_stock'])
        self.assertFalse(day_26['is_out_of_stock'])

        last = result['projections'][-1]
        self.assertEqual(last['projected_stock'], Decimal('0'))
        self.assertTrue(last['is_out_of_stock'])
        self.assertFalse(last['is_low_stock'])

    def test_out_of_stock_beyond_horizon(self):
        result = project_stock(Decimal('100'), Decimal('2'), 30, Decimal('50'), TODAY)

        self.assertEqual(len(result['projections']), 30)
        self.assertIsNone(result['days_until_out_of_stock'])
        self.assertEqual(result['days_until_low_stock'], 26)

    def test_zero_usage_never_runs_out(self):
        result = project_stock(Decimal('10'), Decimal('0'), 30, Decimal('50'), TODAY)

        self.assertIsNone(result['days_until_out_of_stock'])
        self.assertIsNone(result['days_until_low_stock'])
        self.assertEqual(result['projections'][-1]['projected_stock'], Decimal('10.00'))


class InventoryProjectionTests(AnalyticsTestCase):
    def setUp(self):
        super().setUp()
        stock_feed('LAYER', 100)
        stock_feed('REARING', 40)
        # 60 kg of LAYER inside the 30 day window, one record outside it
        self.record('LAYER', 30, days_ago=1)
        self.record('LAYER', 30, days_ago=10)
        self.record('LAYER', 500, days_ago=45)

    def test_projection_per_feed_type(self):
        projections = {
            item['feed_type']: item
            for item in get_inventory_projection(days=60, low_stock_threshold=50, window_days=30, today=TODAY)
        }

        layer = projections['LAYER']
        self.assertEqual(layer['current_stock'], Decimal('100'))
        self.assertEqual(layer['average_daily_usage'], Decimal('2.00'))
        self.assertTrue(layer['has_usage_data'])
        self.assertEqual(layer['days_until_low_stock'], 26)
        self.assertEqual(layer['days_until_out_of_stock'], 50)

        rearing = projections['REARING']
        self.assertFalse(rearing['has_usage_data'])
        self.assertIsNone(rearing['days_until_out_of_stock'])

    def test_feed_type_filter(self):
        projections = get_inventory_projection(feed_type='REARING', today=TODAY)

        self.assertEqual([item['feed_type'] for item in projections], ['REARING'])

    @override_settings(FEED_PROJECTION_DAYS=14)
    def test_defaults_come_from_settings(self):
        projections = get_inventory_projection(feed_type='LAYER', today=TODAY)

        self.assertEqual(len(projections[0]['projections']), 14)

    def test_no_feed_inventory(self):
        Inventory.objects.all().delete()

        self.assertEqual(get_inventory_projection(today=TODAY), [])


class InventoryCountTests(TestCase):
    def test_counts_and_feed_breakdown(self):
        stock_feed('LAYER', 70)
        stock_feed('REARING', 30)
        add_stock(Inventory.EGG, 360)
        add_stock(Inventory.MANURE, Decimal('12.5'))

        counts = get_inventory_counts()

        self.assertEqual(counts['feed'], Decimal('100'))
        self.assertEqual(counts['eggs'], 360)
        self.assertEqual(counts['manure'], Decimal('12.5'))
        self.assertEqual(counts['broilers'], 0)
        self.assertEqual(counts['feed_breakdown'], {
            'LAYER': Decimal('70'),
            'REARING': Decimal('30'),
            'total': Decimal('100'),
        })

    def test_empty_inventory(self):
        counts = get_inventory_counts()

        self.assertEqual(counts['feed'], Decimal('0'))
        self.assertEqual(counts['feed_breakdown'], {'total': Decimal('0')})


class InventoryUsageTests(AnalyticsTestCase):
    def setUp(self):
        super().setUp()
        stock_feed('LAYER', 100)
        stock_feed('REARING', 20)
        stock_feed('PULLET_FEED', 45)
        self.record('LAYER', 150, days_ago=5)

    def test_days_remaining(self):
        rows = {row['feed_type']: row for row in get_inventory_with_usage(window_days=30, today=TODAY)}

        layer = rows['LAYER']
        self.assertEqual(layer['total_usage'], Decimal('150'))
        self.assertEqual(layer['average_daily_usage'], Decimal('5.00'))
        self.assertEqual(layer['days_remaining'], Decimal('20.0'))
        self.assertFalse(layer['is_low_stock'])
        self.assertIsNone(rows['REARING']['days_remaining'])
        self.assertTrue(rows['REARING']['is_low_stock'])

    def test_low_stock_alerts_lowest_first(self):
        alerts = get_low_stock_alerts(threshold=50)

        self.assertEqual([alert['feed_type'] for alert in alerts], ['REARING', 'PULLET_FEED'])
        self.assertEqual(alerts[0]['feed_type_display'], 'Rearing')

    @override_settings(FEED_LOW_STOCK_THRESHOLD_KG=30)
    def test_alert_threshold_from_settings(self):
        alerts = get_low_stock_alerts()

        self.assertEqual([alert['feed_type'] for alert in alerts], ['REARING'])


class SlowMovingFeedTests(AnalyticsTestCase):
    def setUp(self):
        super().setUp()
        stock_feed('LAYER_PHASE_1', '0.1')
        # 0.004 kg a day over the 30 day window
        self.record('LAYER_PHASE_1', '0.12', days_ago=3)

    def test_small_usage_rate_still_projects(self):
        projection = get_inventory_projection(
            feed_type='LAYER_PHASE_1', days=30, low_stock_threshold=50, window_days=30, today=TODAY
        )[0]

        self.assertTrue(projection['has_usage_data'])
        self.assertEqual(projection['average_daily_usage'], Decimal('0.00'))
        self.assertEqual(projection['days_until_out_of_stock'], 25)
        self.assertEqual(projection['projections'][9]['projected_stock'], Decimal('0.06'))

    def test_small_usage_rate_still_has_days_remaining(self):
        row = get_inventory_with_usage(window_days=30, low_stock_threshold=50, today=TODAY)[0]

        self.assertEqual(row['feed_type'], 'LAYER_PHASE_1')
        self.assertEqual(row['days_remaining'], Decimal('25.0'))
