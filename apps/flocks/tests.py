from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.feed.models import FeedProgram, FeedUsage
from .models import Flock


class FlockApiTests(APITestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(username='keeper', password='pass')
        self.client.force_authenticate(user=self.user)
        self.today = timezone.localdate()

    def create_flock(self, **kwargs):
        defaults = {
            'batch_code': 'B-001',
            'arrival_date': self.today - timedelta(days=14),
            'age_in_days': 21,
            'initial_count': 500,
            'current_count': 480,
        }
        defaults.update(kwargs)
        return Flock.objects.create(**defaults)

    def test_create_flock(self):
        response = self.client.post(reverse('flock-list'), {
            'batch_code': 'B-100',
            'arrival_date': str(self.today),
            'age_in_days': 7,
            'initial_count': 300,
            'current_count': 300,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['age_in_weeks'], 1)
        self.assertEqual(Flock.objects.get().batch_code, 'B-100')

    def test_current_count_cannot_exceed_initial(self):
        response = self.client.post(reverse('flock-list'), {
            'batch_code': 'B-101',
            'initial_count': 100,
            'current_count': 120,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('current_count', response.data)

    def test_retrieve_reports_age_and_mortality(self):
        flock = self.create_flock()

        response = self.client.get(reverse('flock-detail', args=[flock.id]))

        self.assertEqual(response.data['age_in_weeks'], 5)
        self.assertEqual(response.data['mortality_count'], 20)

    def test_filter_by_status(self):
        self.create_flock()
        self.create_flock(batch_code='B-002', status='SOLD')

        response = self.client.get(reverse('flock-list'), {'status': 'SOLD'})

        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['batch_code'], 'B-002')

    def test_recommendation(self):
        FeedProgram.objects.create(age_in_weeks=5, age_in_days='35-41', feed_type='REARING', gram_per_hen=Decimal('32'))
        FeedProgram.objects.create(age_in_weeks=6, age_in_days='42-48', feed_type='PULLET_FEED', gram_per_hen=Decimal('37'))
        flock = self.create_flock()

        response = self.client.get(reverse('flock-recommendation', args=[flock.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()
        self.assertEqual(data['feed_type'], 'REARING')
        self.assertEqual(data['total_amount_kg'], 15.36)
        self.assertTrue(data['is_transition_week'])
        self.assertEqual(data['next_feed_type'], 'PULLET_FEED')

    def test_recommendation_without_program(self):
        flock = self.create_flock()

        response = self.client.get(reverse('flock-recommendation', args=[flock.id]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_recommendation_for_unknown_flock(self):
        url = reverse('flock-recommendation', args=['00000000-0000-0000-0000-000000000000'])

        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)

    def test_compliance(self):
        FeedProgram.objects.create(age_in_weeks=5, age_in_days='35-41', feed_type='REARING', gram_per_hen=Decimal('50'))
        flock = self.create_flock(current_count=100, initial_count=100)
        FeedUsage.objects.create(
            flock=flock, feed_type='REARING', date=self.today - timedelta(days=1), amount_used=Decimal('5')
        )

        response = self.client.get(reverse('flock-compliance', args=[flock.id]), {'days': 2})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()
        self.assertEqual(data['recommended_total'], 10.0)
        self.assertEqual(data['actual_total'], 5.0)
        self.assertEqual(data['compliance'], 50.0)
        self.assertEqual(len(data['records']), 2)

    def test_compliance_rejects_bad_days(self):
        flock = self.create_flock()

        response = self.client.get(reverse('flock-compliance', args=[flock.id]), {'days': 'week'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_flock_without_usage(self):
        flock = self.create_flock()

        response = self.client.delete(reverse('flock-detail', args=[flock.id]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Flock.objects.exists())

    def test_flock_with_usage_cannot_be_deleted(self):
        flock = self.create_flock()
        FeedUsage.objects.create(flock=flock, feed_type='REARING', date=self.today, amount_used=Decimal('30'))

        response = self.client.delete(reverse('flock-detail', args=[flock.id]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)
        self.assertTrue(Flock.objects.filter(pk=flock.pk).exists())
        self.assertEqual(FeedUsage.objects.filter(flock=flock).count(), 1)
