import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('customers', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Counter',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=50, unique=True)),
                ('display_order', models.PositiveIntegerField(default=0)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('current_customer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='serving_counters', to='customers.customer')),
            ],
            options={
                'db_table': 'counters',
                'ordering': ['display_order', 'name'],
            },
        ),
        migrations.CreateModel(
            name='QueueEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('event_type', models.CharField(choices=[('joined', 'Joined'), ('called', 'Called'), ('served', 'Served'), ('cancelled', 'Cancelled')], max_length=20)),
                ('queue_position', models.PositiveIntegerField(blank=True, null=True)),
                ('wait_time_minutes', models.PositiveIntegerField(blank=True, null=True)),
                ('service_time_minutes', models.PositiveIntegerField(blank=True, null=True)),
                ('is_priority', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('counter', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='queue_events', to='queues.counter')),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='queue_events', to='customers.customer')),
            ],
            options={
                'db_table': 'queue_events',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['customer', 'event_type'], name='queue_event_customer_idx'),
                    models.Index(fields=['event_type', 'created_at'], name='queue_event_type_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='QueueResetLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('reason', models.TextField(blank=True)),
                ('policy', models.CharField(choices=[('cancel', 'Cancel active entries'), ('delete', 'Delete unpaid active entries')], max_length=20)),
                ('cancelled_count', models.PositiveIntegerField(default=0)),
                ('deleted_count', models.PositiveIntegerField(default=0)),
                ('released_counters', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('actor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='queue_resets', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'queue_reset_logs',
                'ordering': ['-created_at'],
            },
        ),
    ]
