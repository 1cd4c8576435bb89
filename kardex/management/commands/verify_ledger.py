"""
Management command to check cached balances against the ledger.

Usage:
    python manage.py verify_ledger
    python manage.py verify_ledger --item 42
    python manage.py verify_ledger --rebuild
"""

from django.core.management.base import BaseCommand, CommandError

from kardex import ledger
from kardex.exceptions import KardexError


class Command(BaseCommand):
    """Verify ledger integrity command."""

    help = 'Confere o saldo de cada item contra o histórico de movimentações'

    def add_arguments(self, parser):
        parser.add_argument(
            '--item',
            type=int,
            help='Confere apenas o item com este id'
        )
        parser.add_argument(
            '--rebuild',
            action='store_true',
            help='Recalcula o saldo dos itens divergentes a partir do histórico'
        )

    def handle(self, *args, **options):
        if options['item'] is not None:
            try:
                item = ledger.get_item(options['item'])
            except KardexError as exc:
                raise CommandError(exc.message)
            mismatch = ledger.check_integrity(item)
            mismatches = [mismatch] if mismatch else []
        else:
            mismatches = ledger.verify_all()

        if not mismatches:
            self.stdout.write(self.style.SUCCESS('Nenhuma divergência encontrada'))
            return

        for mismatch in mismatches:
            self.stdout.write(
                f'Item {mismatch.item_id}: saldo {mismatch.cached}, '
                f'histórico {mismatch.replayed} (diferença {mismatch.difference})'
            )

        if not options['rebuild']:
            raise CommandError(f'{len(mismatches)} item(ns) com divergência')

        for mismatch in mismatches:
            balance = ledger.rebuild_quantity(ledger.get_item(mismatch.item_id))
            self.stdout.write(f'Item {mismatch.item_id}: saldo recalculado para {balance}')

        self.stdout.write(
            self.style.SUCCESS(f'{len(mismatches)} item(ns) recalculado(s)')
        )
