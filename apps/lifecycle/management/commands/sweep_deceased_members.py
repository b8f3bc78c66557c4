"""
Management command to re-run deceased-member resolution.

Sweeps are best-effort when triggered by a status change; this recovers
any that failed.

Usage:
    python manage.py sweep_deceased_members              # All deceased users
    python manage.py sweep_deceased_members --user=email # Specific user
    python manage.py sweep_deceased_members --dry-run    # Show what would happen
"""

from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model

User = get_user_model()


class Command(BaseCommand):
    help = 'Auto-resolve votes still owed by members whose own death has been reported'

    def add_arguments(self, parser):
        parser.add_argument(
            '--user',
            type=str,
            help='Email of specific user to sweep (default: every deceased user)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='List the votes that would be auto-resolved without changing anything',
        )

    def handle(self, *args, **options):
        from apps.lifecycle.models import Lifecycle
        from apps.lifecycle.services import sweep_deceased_member, find_owed_votes

        dry_run = options['dry_run']
        user_email = options.get('user')

        if dry_run:
            self.stdout.write(self.style.WARNING('DRY RUN - No changes will be made\n'))

        users = User.objects.filter(lifecycle__status__in=Lifecycle.DECEASED_STATUSES)
        if user_email:
            users = users.filter(email=user_email)
            if not users.exists():
                self.stdout.write(self.style.ERROR(f'No deceased user found: {user_email}'))
                return

        total_resolved = 0
        total_failed = 0

        for user in users.order_by('id'):
            owed = find_owed_votes(user)
            if not owed:
                continue

            self.stdout.write(f'\n{user.email}:')

            if dry_run:
                for creator, flow in owed:
                    self.stdout.write(f'  Would auto-resolve {flow} vote for {creator.email}')
                    total_resolved += 1
                continue

            for outcome in sweep_deceased_member(user):
                if outcome.error:
                    total_failed += 1
                    self.stdout.write(self.style.ERROR(
                        f'  Creator {outcome.creator_id}: {outcome.error}'
                    ))
                elif outcome.resolved:
                    total_resolved += 1
                    suffix = ' (opened)' if outcome.opened else ' (data deleted)' if outcome.erased else ''
                    self.stdout.write(self.style.SUCCESS(
                        f'  Auto-resolved {outcome.flow} vote for creator {outcome.creator_id}{suffix}'
                    ))

        self.stdout.write('')
        if dry_run:
            self.stdout.write(self.style.WARNING(f'Would auto-resolve {total_resolved} vote(s)'))
        else:
            self.stdout.write(self.style.SUCCESS(f'Auto-resolved {total_resolved} vote(s)'))
            if total_failed:
                self.stdout.write(self.style.ERROR(f'{total_failed} sweep(s) failed'))
