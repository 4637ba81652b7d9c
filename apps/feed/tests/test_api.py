from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from ..models import FeedProgram, FeedPurchase, FeedSupplier, FeedUsage, Inventory
from .utils import create_flock, create_program, feed_balance, stock_feed


class FeedApiTestCase(APITestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(username='keeper', password='pass')
        self.client.force_authenticate(user=self.user)
        self.today = timezone.localdate()
        create_program(18, 'LAYER', 75)
        self.flock = create_flock(age_in_weeks=18, on_date=self.today, count=200)


class AuthenticationTests(APITestCase):
    def test_endpoints_require_authentication(self):
        response = self.client.get(reverse('inventory-list'))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_obtain_jwt_and_use_it(self):
        get_user_model().objects.create_user(username='keeper', password='pass')

        response = self.client.post(reverse('token_obtain_pair'), {'username': 'keeper', 'password': 'pass'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        response = self.client.get(reverse('inventory-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class FeedUsageApiTests(FeedApiTestCase):
    def test_create_usage_deducts_stock(self):
        stock_feed('LAYER', 100)

        response = self.client.post(reverse('feed-usage-list'), {
            'flock_id': str(self.flock.id),
            'amount_used': '30',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['feed_type'], 'LAYER')
        self.assertEqual(response.data['batch_code'], 'B-001')
        self.assertEqual(response.data['recorded_by_name'], 'keeper')
        self.assertEqual(feed_balance('LAYER'), Decimal('70'))

    def test_create_usage_with_insufficient_stock(self):
        stock_feed('LAYER', 100)

        response = self.client.post(reverse('feed-usage-list'), {
            'flock_id': str(self.flock.id),
            'amount_used': '150',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Insufficient LAYER inventory', response.data['error'])
        self.assertFalse(FeedUsage.objects.exists())

    def test_create_usage_validates_payload(self):
        response = self.client.post(reverse('feed-usage-list'), {
            'flock_id': str(self.flock.id),
            'amount_used': '-1',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amount_used', response.data)

    def test_patch_and_delete_reconcile_stock(self):
        stock_feed('LAYER', 100)
        created = self.client.post(reverse('feed-usage-list'), {
            'flock_id': str(self.flock.id),
            'amount_used': '30',
        }, format='json')
        url = reverse('feed-usage-detail', args=[created.data['id']])

        response = self.client.patch(url, {'amount_used': '45'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['amount_used'], '45.00')
        self.assertEqual(feed_balance('LAYER'), Decimal('55'))

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(feed_balance('LAYER'), Decimal('100'))

    def test_unknown_usage_record(self):
        url = reverse('feed-usage-detail', args=['00000000-0000-0000-0000-000000000000'])

        self.assertEqual(self.client.delete(url).status_code, status.HTTP_404_NOT_FOUND)

    def test_list_filters_by_flock(self):
        other = create_flock('B-002', age_in_weeks=18, on_date=self.today)
        FeedUsage.objects.create(flock=self.flock, feed_type='LAYER', date=self.today, amount_used=5)
        FeedUsage.objects.create(flock=other, feed_type='LAYER', date=self.today, amount_used=7)

        response = self.client.get(reverse('feed-usage-list'), {'flock_id': str(other.id)})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['amount_used'], '7.00')

    def test_list_rejects_malformed_filters(self):
        for params in ({'start_date': 'notadate'}, {'end_date': '2024-13-01'}, {'flock_id': 'abc'}):
            response = self.client.get(reverse('feed-usage-list'), params)

            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, params)
            self.assertIn(next(iter(params)), response.data)


class InventoryApiTests(FeedApiTestCase):
    def test_add_and_deduct(self):
        response = self.client.post(reverse('inventory-add'), {
            'type': 'FEED', 'amount': '100', 'details': {'LAYER': '100'}
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['feed_details'], {'LAYER': '100.00'})

        response = self.client.post(reverse('inventory-deduct'), {
            'type': 'FEED', 'amount': '150', 'details': {'LAYER': '150'}
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Insufficient LAYER inventory. Available: 100.00, Required: 150.00')

    def test_unknown_feed_type_in_details(self):
        response = self.client.post(reverse('inventory-add'), {
            'type': 'FEED', 'amount': '10', 'details': {'GROWER': '10'}
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Inventory.objects.exists())

    def test_counts_usage_and_low_stock(self):
        stock_feed('LAYER', 100)
        stock_feed('REARING', 10)

        counts = self.client.get(reverse('inventory-counts'))
        self.assertEqual(counts.status_code, status.HTTP_200_OK)
        self.assertEqual(counts.json()['feed_breakdown']['total'], 110.0)

        usage = self.client.get(reverse('inventory-usage'), {'window_days': 7})
        self.assertEqual(usage.status_code, status.HTTP_200_OK)
        self.assertEqual(len(usage.json()), 2)

        alerts = self.client.get(reverse('inventory-low-stock'), {'threshold': '20'})
        self.assertEqual([alert['feed_type'] for alert in alerts.json()], ['REARING'])


class FeedProgramApiTests(FeedApiTestCase):
    def test_non_staff_cannot_edit(self):
        response = self.client.post(reverse('feed-program-list'), {
            'age_in_weeks': 19, 'age_in_days': '133-139', 'feed_type': 'LAYER', 'gram_per_hen': '80'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_can_create_and_everyone_can_read(self):
        self.user.is_staff = True
        self.user.save()

        response = self.client.post(reverse('feed-program-list'), {
            'age_in_weeks': 19, 'age_in_days': '133-139', 'feed_type': 'LAYER', 'gram_per_hen': '80'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get(reverse('feed-program-list'))
        self.assertEqual([row['age_in_weeks'] for row in response.data], [18, 19])
        self.assertEqual(response.data[0]['feed_type_display'], 'Layer')

    def test_duplicate_active_week_is_rejected(self):
        self.user.is_staff = True
        self.user.save()

        response = self.client.post(reverse('feed-program-list'), {
            'age_in_weeks': 18, 'age_in_days': '126-132', 'feed_type': 'REARING', 'gram_per_hen': '60'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(FeedProgram.objects.filter(age_in_weeks=18).count(), 1)


class FeedPurchaseApiTests(FeedApiTestCase):
    def setUp(self):
        super().setUp()
        self.supplier = FeedSupplier.objects.create(name='Alema Feeds', phone='0712000000')

    def create_purchase(self, **extra):
        payload = {'feed_type': 'LAYER', 'quantity': '2', 'unit': 'QUINTAL', 'cost_per_unit': '3000'}
        payload.update(extra)
        return self.client.post(reverse('feed-purchase-list'), payload, format='json')

    def test_purchase_adds_stock(self):
        response = self.create_purchase(supplier=str(self.supplier.id))

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['quantity_kg'], '200.00')
        self.assertEqual(response.data['cost_per_kg'], '30.00')
        self.assertEqual(response.data['supplier_name'], 'Alema Feeds')
        self.assertEqual(feed_balance('LAYER'), Decimal('200'))

        response = self.client.delete(reverse('feed-purchase-detail', args=[response.data['id']]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(feed_balance('LAYER'), Decimal('0'))
        self.assertFalse(FeedPurchase.objects.exists())

    def test_patch_quantity_moves_stock(self):
        url = reverse('feed-purchase-detail', args=[self.create_purchase().data['id']])

        response = self.client.patch(url, {'quantity': '3'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quantity_kg'], '300.00')
        self.assertEqual(response.data['total_cost'], '9000.00')
        self.assertEqual(feed_balance('LAYER'), Decimal('300'))

    def test_patch_cost_leaves_stock(self):
        url = reverse('feed-purchase-detail', args=[self.create_purchase().data['id']])

        response = self.client.patch(url, {'cost_per_unit': '2800', 'notes': 'Invoice corrected'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['cost_per_kg'], '28.00')
        self.assertEqual(response.data['notes'], 'Invoice corrected')
        self.assertEqual(feed_balance('LAYER'), Decimal('200'))

    def test_patch_below_consumed_stock_is_rejected(self):
        url = reverse('feed-purchase-detail', args=[self.create_purchase().data['id']])
        self.client.post(reverse('inventory-deduct'), {
            'type': 'FEED', 'amount': '150', 'details': {'LAYER': '150'}
        }, format='json')

        response = self.client.patch(url, {'quantity': '1'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Insufficient LAYER inventory. Available: 50.00, Required: 100.00')
        self.assertEqual(FeedPurchase.objects.get().quantity_kg, Decimal('200'))
        self.assertEqual(feed_balance('LAYER'), Decimal('50'))


class FeedSupplierApiTests(FeedApiTestCase):
    def test_create_update_and_list(self):
        response = self.client.post(reverse('feed-supplier-list'), {
            'name': 'Interchick', 'contact_name': 'Asha', 'phone': '0755000000'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        url = reverse('feed-supplier-detail', args=[response.data['id']])

        response = self.client.patch(url, {'is_active': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.get(reverse('feed-supplier-list'), {'is_active': 'false'})
        self.assertEqual([row['name'] for row in response.data], ['Interchick'])

    def test_deleting_supplier_keeps_purchases(self):
        supplier = FeedSupplier.objects.create(name='Interchick')
        purchase = self.client.post(reverse('feed-purchase-list'), {
            'feed_type': 'LAYER', 'quantity': '50', 'supplier': str(supplier.id)
        }, format='json').data

        response = self.client.delete(reverse('feed-supplier-detail', args=[supplier.id]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertIsNone(FeedPurchase.objects.get(pk=purchase['id']).supplier)
        self.assertEqual(feed_balance('LAYER'), Decimal('50'))


class FeedPlanningApiTests(FeedApiTestCase):
    def test_recommendations_and_requirements(self):
        response = self.client.get(reverse('feed-recommendations'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        entry = response.json()[0]
        self.assertEqual(entry['flock']['batch_code'], 'B-001')
        self.assertEqual(entry['recommendation']['total_amount_kg'], 15.0)

        daily = self.client.get(reverse('feed-requirements-daily')).json()
        weekly = self.client.get(reverse('feed-requirements-weekly')).json()
        self.assertEqual(daily[0]['total_amount_kg'], 15.0)
        self.assertEqual(weekly[0]['total_amount_kg'], 105.0)

    def test_consumption_and_projection(self):
        stock_feed('LAYER', 100)
        FeedUsage.objects.create(flock=self.flock, feed_type='LAYER', date=self.today, amount_used=30)

        consumption = self.client.get(reverse('feed-analytics-consumption'))
        self.assertEqual(consumption.status_code, status.HTTP_200_OK)
        self.assertEqual(consumption.json()['summary']['total_usage'], 30.0)

        projection = self.client.get(reverse('feed-analytics-projection'), {'days': 10, 'feed_type': 'LAYER'})
        self.assertEqual(projection.status_code, status.HTTP_200_OK)
        self.assertEqual(len(projection.json()[0]['projections']), 10)
        self.assertEqual(projection.json()[0]['average_daily_usage'], 1.0)

    def test_invalid_query_parameters(self):
        response = self.client.get(reverse('feed-analytics-projection'), {'days': 0})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class SeedFeedProgramCommandTests(TestCase):
    def test_seed_replaces_program(self):
        create_program(30, 'CUSTOM', 10)

        call_command('seed_feed_program', stdout=StringIO())

        self.assertEqual(FeedProgram.objects.count(), 22)
        self.assertFalse(FeedProgram.objects.filter(age_in_weeks=30).exists())
        week_5 = FeedProgram.objects.get(age_in_weeks=5)
        self.assertEqual((week_5.feed_type, week_5.gram_per_hen), ('REARING', Decimal('32')))

    def test_keep_existing(self):
        create_program(1, 'CUSTOM', 12)

        call_command('seed_feed_program', '--keep-existing', stdout=StringIO())

        self.assertEqual(FeedProgram.objects.count(), 22)
        self.assertEqual(FeedProgram.objects.get(age_in_weeks=1).feed_type, 'CUSTOM')
