"""
Initial migration for Stockledger models.
"""

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Stockledger models: InventoryItem, StockEntry, Requisition, Reception, Distribution."""

    initial = True

    dependencies = [
        ('contenttypes', '0002_remove_content_type_name'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='InventoryItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('category', models.CharField(blank=True, db_index=True, default='', max_length=100, verbose_name='Category')),
                ('unit', models.CharField(help_text='E.g. pcs, ream, box', max_length=30, verbose_name='Unit')),
                ('_stock', models.IntegerField(default=0, verbose_name='Stock')),
                ('min_stock', models.PositiveIntegerField(default=0, help_text='Informational threshold for low stock alerts', verbose_name='Minimum stock')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Inventory item',
                'verbose_name_plural': 'Inventory items',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['category', 'name'], name='stockledger_item_cat_idx')],
            },
        ),
        migrations.CreateModel(
            name='StockEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('direction', models.CharField(choices=[('IN', 'In'), ('OUT', 'Out')], max_length=3, verbose_name='Direction')),
                ('quantity', models.PositiveIntegerField(help_text='Always positive. Direction carries the sign.', verbose_name='Quantity')),
                ('reference_id', models.PositiveBigIntegerField(blank=True, null=True, verbose_name='Reference ID')),
                ('reason', models.CharField(help_text='Required. E.g. "Reception #12", "Distribution DST-004"', max_length=255, verbose_name='Reason')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadata')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Timestamp')),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='entries', to='stockledger.inventoryitem', verbose_name='Item')),
                ('reference_type', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='contenttypes.contenttype', verbose_name='Reference type')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='User')),
            ],
            options={
                'verbose_name': 'Stock entry',
                'verbose_name_plural': 'Stock entries',
                'ordering': ['timestamp', 'pk'],
                'indexes': [
                    models.Index(fields=['item', 'timestamp'], name='stockledger_entry_item_idx'),
                    models.Index(fields=['reference_type', 'reference_id'], name='stockledger_entry_ref_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(quantity__gt=0), name='stock_entry_quantity_positive'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Requisition',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('request_number', models.CharField(max_length=30, unique=True, verbose_name='Request number')),
                ('item_name', models.CharField(max_length=200, verbose_name='Item name')),
                ('quantity', models.PositiveIntegerField(verbose_name='Quantity')),
                ('unit', models.CharField(max_length=30, verbose_name='Unit')),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('APPROVED', 'Approved'), ('REJECTED', 'Rejected'), ('RECEIVED', 'Received')], db_index=True, default='PENDING', max_length=20, verbose_name='Status')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Purchase request',
                'verbose_name_plural': 'Purchase requests',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Reception',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('requisition_ref', models.CharField(blank=True, db_index=True, default='', max_length=64, verbose_name='Purchase request')),
                ('status', models.CharField(choices=[('COMPLETE', 'Complete'), ('PARTIAL', 'Partial'), ('DIFFERENT', 'Different')], db_index=True, max_length=20, verbose_name='Status')),
                ('receipt_date', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Receipt date')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('received_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Received by')),
            ],
            options={
                'verbose_name': 'Reception',
                'verbose_name_plural': 'Receptions',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='ReceptionLine',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_name', models.CharField(max_length=200, verbose_name='Item name')),
                ('requested_quantity', models.PositiveIntegerField(verbose_name='Requested')),
                ('received_quantity', models.PositiveIntegerField(verbose_name='Received')),
                ('unit', models.CharField(max_length=30, verbose_name='Unit')),
                ('item', models.ForeignKey(blank=True, help_text='Empty = not tracked in stock', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='reception_lines', to='stockledger.inventoryitem', verbose_name='Inventory item')),
                ('reception', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lines', to='stockledger.reception', verbose_name='Reception')),
            ],
            options={
                'verbose_name': 'Reception line',
                'verbose_name_plural': 'Reception lines',
                'ordering': ['pk'],
            },
        ),
        migrations.CreateModel(
            name='Distribution',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('note_number', models.CharField(help_text='Generated as DST-001, DST-002, ...', max_length=30, unique=True, verbose_name='Note number')),
                ('staff_name', models.CharField(blank=True, default='', max_length=200, verbose_name='Staff name')),
                ('department', models.CharField(blank=True, default='', max_length=200, verbose_name='Department')),
                ('purpose', models.CharField(blank=True, default='', max_length=255, verbose_name='Purpose')),
                ('distribution_date', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Distribution date')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('distributed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Distributed by')),
            ],
            options={
                'verbose_name': 'Distribution',
                'verbose_name_plural': 'Distributions',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='DistributionLine',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_name', models.CharField(max_length=200, verbose_name='Item name')),
                ('quantity', models.PositiveIntegerField(verbose_name='Quantity')),
                ('unit', models.CharField(max_length=30, verbose_name='Unit')),
                ('distribution', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lines', to='stockledger.distribution', verbose_name='Distribution')),
                ('item', models.ForeignKey(blank=True, help_text='Empty = not tracked in stock', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='distribution_lines', to='stockledger.inventoryitem', verbose_name='Inventory item')),
            ],
            options={
                'verbose_name': 'Distribution line',
                'verbose_name_plural': 'Distribution lines',
                'ordering': ['pk'],
            },
        ),
    ]
