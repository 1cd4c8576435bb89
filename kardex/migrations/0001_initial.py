"""
Initial migration for Kardex models.
"""

from decimal import Decimal
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Kardex models: StockItem, StockMovement."""

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='StockItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, verbose_name='Nome')),
                ('description', models.TextField(blank=True, default='', verbose_name='Descrição')),
                ('unit_cost', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12, verbose_name='Custo unitário')),
                ('min_stock', models.DecimalField(blank=True, decimal_places=3, help_text='Apenas sinaliza estoque baixo; não bloqueia saídas.', max_digits=12, null=True, verbose_name='Estoque mínimo')),
                ('initial_quantity', models.DecimalField(decimal_places=3, default=Decimal('0'), editable=False, max_digits=12, verbose_name='Quantidade inicial')),
                ('_quantity', models.DecimalField(decimal_places=3, default=Decimal('0'), editable=False, max_digits=12, verbose_name='Quantidade')),
                ('version', models.PositiveIntegerField(default=0, editable=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Criado em')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Atualizado em')),
            ],
            options={
                'verbose_name': 'Item de Estoque',
                'verbose_name_plural': 'Itens de Estoque',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='StockMovement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('kind', models.CharField(choices=[('increase', 'Entrada'), ('decrease', 'Saída')], max_length=10, verbose_name='Tipo')),
                ('quantity', models.DecimalField(decimal_places=3, help_text='Sempre positiva; o sinal vem do tipo.', max_digits=12, verbose_name='Quantidade')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Observações')),
                ('attachments', models.JSONField(blank=True, default=list, help_text='Lista de {"name", "url"}', verbose_name='Anexos')),
                ('work_order_id', models.CharField(blank=True, default='', max_length=100, verbose_name='Ordem de Serviço')),
                ('work_order_code', models.CharField(blank=True, default='', max_length=100, verbose_name='Código da OS')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Data/Hora')),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='kardex.stockitem', verbose_name='Item')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Usuário')),
            ],
            options={
                'verbose_name': 'Movimentação',
                'verbose_name_plural': 'Movimentações',
                'ordering': ['created_at', 'id'],
            },
        ),
        # Constraints
        migrations.AddConstraint(
            model_name='stockitem',
            constraint=models.CheckConstraint(condition=models.Q(_quantity__gte=0), name='kardex_item_quantity_non_negative'),
        ),
        migrations.AddConstraint(
            model_name='stockitem',
            constraint=models.CheckConstraint(condition=models.Q(initial_quantity__gte=0), name='kardex_item_initial_quantity_non_negative'),
        ),
        migrations.AddConstraint(
            model_name='stockitem',
            constraint=models.CheckConstraint(condition=models.Q(unit_cost__gte=0), name='kardex_item_unit_cost_non_negative'),
        ),
        migrations.AddConstraint(
            model_name='stockitem',
            constraint=models.CheckConstraint(condition=models.Q(('min_stock__isnull', True), ('min_stock__gte', 0), _connector='OR'), name='kardex_item_min_stock_non_negative'),
        ),
        migrations.AddConstraint(
            model_name='stockmovement',
            constraint=models.CheckConstraint(condition=models.Q(quantity__gt=0), name='kardex_movement_quantity_positive'),
        ),
        migrations.AddConstraint(
            model_name='stockmovement',
            constraint=models.CheckConstraint(condition=models.Q(('work_order_id', ''), ('kind', 'decrease'), _connector='OR'), name='kardex_movement_work_order_on_decrease'),
        ),
        # Indexes
        migrations.AddIndex(
            model_name='stockmovement',
            index=models.Index(fields=['item', 'created_at'], name='kardex_mov_item_created_idx'),
        ),
    ]
