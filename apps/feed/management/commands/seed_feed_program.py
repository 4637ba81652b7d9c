from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.feed.models import FeedProgram

# (age_in_weeks, age_in_days, feed_type, gram_per_hen)
LAYER_PROGRAM = [
    (1, '1-7', 'LAYER_STARTER', 10),
    (2, '8-14', 'LAYER_STARTER', 16),
    (3, '15-21', 'LAYER_STARTER', 20),
    (4, '22-28', 'REARING', 26),
    (5, '29-35', 'REARING', 32),
    (6, '36-42', 'REARING', 37),
    (7, '43-49', 'REARING', 43),
    (8, '50-56', 'REARING', 47),
    (9, '57-63', 'REARING', 51),
    (10, '64-70', 'PULLET_FEED', 55),
    (11, '71-77', 'PULLET_FEED', 58),
    (12, '78-84', 'PULLET_FEED', 64),
    (13, '85-91', 'PULLET_FEED', 65),
    (14, '92-98', 'PULLET_FEED', 68),
    (15, '99-105', 'PULLET_FEED', 70),
    (16, '106-112', 'PULLET_FEED', 71),
    (17, '113-119', 'PULLET_FEED', 72),
    (18, '120-126', 'LAYER', 75),
    (19, '127-133', 'LAYER', 80),
    (20, '134-140', 'LAYER', 92),
    (21, '141-147', 'LAYER_PHASE_1', 125),
    (22, '148-154', 'LAYER_PHASE_1', 158),
]


class Command(BaseCommand):
    help = 'Seed the weekly layer feed program'

    def add_arguments(self, parser):
        parser.add_argument(
            '--keep-existing',
            action='store_true',
            help='Only add weeks that have no active program instead of replacing the table',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Seeding layer feed program...')

        if not options['keep_existing']:
            deleted, _ = FeedProgram.objects.all().delete()
            if deleted:
                self.stdout.write(self.style.WARNING(f'Removed {deleted} existing program weeks'))

        created = 0
        for age_in_weeks, age_in_days, feed_type, gram_per_hen in LAYER_PROGRAM:
            _, was_created = FeedProgram.objects.get_or_create(
                age_in_weeks=age_in_weeks,
                is_active=True,
                defaults={
                    'breed': 'layer',
                    'age_in_days': age_in_days,
                    'feed_type': feed_type,
                    'gram_per_hen': Decimal(gram_per_hen),
                },
            )
            created += was_created

        self.stdout.write(self.style.SUCCESS(f'Successfully seeded {created} feed program weeks.'))
