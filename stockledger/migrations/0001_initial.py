"""
Initial migration for Stockledger models.
"""

from decimal import Decimal
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Stockledger models."""

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Location',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, unique=True, verbose_name='Name')),
                ('description', models.TextField(blank=True, default='', verbose_name='Description')),
                ('address', models.CharField(blank=True, default='', max_length=255, verbose_name='Address')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Location',
                'verbose_name_plural': 'Locations',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sku', models.CharField(max_length=64, unique=True, verbose_name='SKU')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12, verbose_name='Price')),
                ('cost', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12, verbose_name='Cost')),
                ('min_stock', models.PositiveIntegerField(default=0, verbose_name='Minimum stock')),
                ('max_stock', models.PositiveIntegerField(blank=True, null=True, verbose_name='Maximum stock')),
                ('track_batch', models.BooleanField(default=False, verbose_name='Track batches')),
                ('track_expiry', models.BooleanField(default=False, verbose_name='Track expiry')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Product',
                'verbose_name_plural': 'Products',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Batch',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('batch_number', models.CharField(max_length=50, verbose_name='Batch number')),
                ('quantity', models.PositiveIntegerField(default=0, verbose_name='Initial quantity')),
                ('cost', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12, verbose_name='Unit cost')),
                ('manufacturing_date', models.DateField(blank=True, null=True, verbose_name='Manufacturing date')),
                ('expiry_date', models.DateField(blank=True, db_index=True, help_text='Last day the batch can be sold or used', null=True, verbose_name='Expiry date')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='batches', to='stockledger.product', verbose_name='Product')),
            ],
            options={
                'verbose_name': 'Batch',
                'verbose_name_plural': 'Batches',
                'ordering': ['expiry_date', 'created_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('product', 'batch_number'), name='unique_batch_number_per_product'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockCell',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.IntegerField(default=0, verbose_name='Quantity')),
                ('reserved', models.IntegerField(default=0, help_text='Committed to open orders', verbose_name='Reserved')),
                ('available', models.IntegerField(default=0, help_text='quantity - reserved', verbose_name='Available')),
                ('status', models.CharField(choices=[('IN_STOCK', 'In stock'), ('LOW_STOCK', 'Low stock'), ('OUT_OF_STOCK', 'Out of stock')], db_index=True, default='OUT_OF_STOCK', max_length=20, verbose_name='Status')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('last_updated', models.DateTimeField(auto_now=True)),
                ('batch', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='cells', to='stockledger.batch', verbose_name='Batch')),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='cells', to='stockledger.location', verbose_name='Location')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='cells', to='stockledger.product', verbose_name='Product')),
            ],
            options={
                'verbose_name': 'Stock cell',
                'verbose_name_plural': 'Stock cells',
                'indexes': [
                    models.Index(fields=['product', 'location'], name='cell_product_location_idx'),
                    models.Index(fields=['location', 'status'], name='cell_location_status_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('product', 'location', 'batch'), name='unique_stock_cell'),
                    models.UniqueConstraint(condition=models.Q(('batch__isnull', True)), fields=('product', 'location'), name='unique_stock_cell_no_batch'),
                    models.CheckConstraint(condition=models.Q(('quantity__gte', 0), ('reserved__gte', 0), ('available__gte', 0)), name='stock_cell_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.IntegerField(help_text='Positive = in, negative = out', verbose_name='Delta')),
                ('type', models.CharField(choices=[('in', 'In'), ('out', 'Out'), ('adjustment', 'Adjustment')], max_length=20, verbose_name='Type')),
                ('reference', models.CharField(blank=True, db_index=True, default='', help_text='Sale/transfer id or free text', max_length=100, verbose_name='Reference')),
                ('notes', models.CharField(blank=True, default='', max_length=255, verbose_name='Notes')),
                ('actor_id', models.CharField(max_length=100, verbose_name='Actor')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Timestamp')),
                ('batch', models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='+', to='stockledger.batch', verbose_name='Batch')),
                ('cell', models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='logs', to='stockledger.stockcell', verbose_name='Stock cell')),
                ('location', models.ForeignKey(db_constraint=False, on_delete=django.db.models.deletion.DO_NOTHING, related_name='+', to='stockledger.location', verbose_name='Location')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_logs', to='stockledger.product', verbose_name='Product')),
            ],
            options={
                'verbose_name': 'Stock log entry',
                'verbose_name_plural': 'Stock log',
                'ordering': ['timestamp', 'pk'],
                'indexes': [
                    models.Index(fields=['cell', 'timestamp'], name='log_cell_timestamp_idx'),
                    models.Index(fields=['product', 'location'], name='log_product_location_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Transfer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('transfer_no', models.CharField(blank=True, max_length=30, null=True, unique=True, verbose_name='Transfer number')),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('IN_TRANSIT', 'In transit'), ('COMPLETED', 'Completed'), ('CANCELLED', 'Cancelled')], db_index=True, default='PENDING', max_length=20, verbose_name='Status')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('actor_id', models.CharField(max_length=100, verbose_name='Requested by')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True, verbose_name='Completed at')),
                ('from_location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transfers_from', to='stockledger.location', verbose_name='From')),
                ('to_location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transfers_to', to='stockledger.location', verbose_name='To')),
            ],
            options={
                'verbose_name': 'Transfer',
                'verbose_name_plural': 'Transfers',
                'ordering': ['-created_at'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('from_location', models.F('to_location')), _negated=True), name='transfer_distinct_locations'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TransferItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.PositiveIntegerField(verbose_name='Quantity')),
                ('cost', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12, verbose_name='Unit cost')),
                ('batch', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='transfer_items', to='stockledger.batch', verbose_name='Batch')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transfer_items', to='stockledger.product', verbose_name='Product')),
                ('transfer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='stockledger.transfer')),
            ],
            options={
                'verbose_name': 'Transfer item',
                'verbose_name_plural': 'Transfer items',
            },
        ),
        migrations.CreateModel(
            name='Sale',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('invoice_no', models.CharField(blank=True, max_length=30, null=True, unique=True, verbose_name='Invoice number')),
                ('customer_name', models.CharField(blank=True, default='', max_length=200, verbose_name='Customer')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('total_amount', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('discount', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('tax', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('final_amount', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('actor_id', models.CharField(max_length=100, verbose_name='Cashier')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='sales', to='stockledger.location', verbose_name='Location')),
            ],
            options={
                'verbose_name': 'Sale',
                'verbose_name_plural': 'Sales',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='SaleItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.PositiveIntegerField(verbose_name='Quantity')),
                ('price', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Unit price')),
                ('discount', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=5, verbose_name='Discount (%)')),
                ('total', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Total')),
                ('batch', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='sale_items', to='stockledger.batch')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='sale_items', to='stockledger.product')),
                ('sale', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='stockledger.sale')),
            ],
            options={
                'verbose_name': 'Sale item',
                'verbose_name_plural': 'Sale items',
            },
        ),
        migrations.CreateModel(
            name='Alert',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('LOW_STOCK', 'Low stock'), ('EXPIRY', 'Expiry'), ('REORDER', 'Reorder')], max_length=20, verbose_name='Type')),
                ('severity', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High')], default='medium', max_length=10, verbose_name='Severity')),
                ('message', models.CharField(max_length=500, verbose_name='Message')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('is_resolved', models.BooleanField(default=False, verbose_name='Resolved')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Created at')),
                ('resolved_at', models.DateTimeField(blank=True, null=True, verbose_name='Resolved at')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='alerts', to='stockledger.product', verbose_name='Product')),
            ],
            options={
                'verbose_name': 'Alert',
                'verbose_name_plural': 'Alerts',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['product', 'type', 'is_active', 'is_resolved'], name='alert_open_lookup_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_active', True), ('is_resolved', False)), fields=('product', 'type'), name='unique_open_alert_per_product_type'),
                ],
            },
        ),
    ]
