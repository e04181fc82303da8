from django.core.management.base import BaseCommand, CommandError
from apps.identity.models import User


class Command(BaseCommand):
    help = 'Grants (or with --revoke, removes) store admin access for a user by email'

    def add_arguments(self, parser):
        parser.add_argument('email')
        parser.add_argument('--revoke', action='store_true')
        parser.add_argument(
            '--create-with-password',
            dest='password',
            help='Create the account with this password if it does not exist',
        )

    def handle(self, *args, **options):
        email = options['email'].strip().lower()
        user = User.objects.filter(email__iexact=email).first()

        if user is None:
            if not options['password']:
                raise CommandError(f'No user with email {email}')
            user = User.objects.create_user(
                username=email, email=email, password=options['password']
            )
            self.stdout.write(self.style.SUCCESS(f'Created user: {email}'))

        user.is_admin = not options['revoke']
        user.save(update_fields=['is_admin'])

        if user.is_admin:
            self.stdout.write(self.style.SUCCESS(f'{email} is now an admin'))
        else:
            self.stdout.write(self.style.WARNING(f'Admin access removed for {email}'))
