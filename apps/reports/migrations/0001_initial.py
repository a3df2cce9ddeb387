from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='DailyReport',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(unique=True)),
                ('total_cash', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_gcash', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_maya', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_credit_card', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_bank_transfer', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('petty_cash_start', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('petty_cash_end', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('expenses', models.JSONField(blank=True, default=list)),
                ('funds', models.JSONField(blank=True, default=list)),
                ('cash_turnover', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('transaction_count', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('generated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='daily_reports', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'daily_reports',
                'ordering': ['-date'],
            },
        ),
    ]
