import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Customer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('or_number', models.CharField(max_length=50, unique=True)),
                ('name', models.CharField(max_length=150)),
                ('contact_number', models.CharField(blank=True, max_length=30)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('age', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('address', models.TextField(blank=True)),
                ('occupation', models.CharField(blank=True, max_length=100)),
                ('distribution_info', models.CharField(choices=[('lalamove', 'Lalamove'), ('lbc', 'LBC'), ('pickup', 'Pick Up')], default='pickup', max_length=20)),
                ('doctor_assigned', models.CharField(blank=True, max_length=150)),
                ('prescription', models.JSONField(blank=True, default=dict)),
                ('grade_type', models.CharField(blank=True, max_length=100)),
                ('lens_type', models.CharField(blank=True, max_length=100)),
                ('frame_code', models.CharField(blank=True, max_length=100)),
                ('estimated_time', models.JSONField(blank=True, default=dict)),
                ('payment_info', models.JSONField(blank=True, default=dict)),
                ('remarks', models.TextField(blank=True)),
                ('priority_flags', models.JSONField(blank=True, default=dict)),
                ('queue_status', models.CharField(choices=[('waiting', 'Waiting'), ('serving', 'Serving'), ('processing', 'Processing'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='waiting', max_length=20)),
                ('token_number', models.PositiveIntegerField()),
                ('token_date', models.DateField(default=django.utils.timezone.localdate)),
                ('manual_position', models.PositiveIntegerField(blank=True, null=True)),
                ('cancellation_reason', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('sales_agent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='registered_customers', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'customers',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['queue_status', 'created_at'], name='customers_status_idx'),
                    models.Index(fields=['sales_agent', 'created_at'], name='customers_agent_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('token_date', 'token_number'), name='unique_daily_token'),
                ],
            },
        ),
    ]
