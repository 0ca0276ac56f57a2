# Generated manually for the HouseParty purchases app

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Purchase',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('product_type', models.CharField(choices=[('kit', 'House kit'), ('premium', 'Premium')], max_length=20)),
                ('product_ref', models.CharField(max_length=64)),
                ('price_cents', models.PositiveIntegerField()),
                ('currency', models.CharField(default='USD', max_length=3)),
                ('provider', models.CharField(choices=[('paypal', 'PayPal')], default='paypal', max_length=20)),
                ('provider_order_id', models.CharField(db_index=True, max_length=64)),
                ('transaction_id', models.CharField(blank=True, max_length=64)),
                ('status', models.CharField(choices=[('completed', 'Completed'), ('failed', 'Failed')], default='completed', max_length=20)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='purchases', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'user_purchases',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', 'status'], name='purchases_user_status_idx'),
                    models.Index(fields=['product_type', 'status'], name='purchases_type_status_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('status', 'completed')), fields=('user', 'provider_order_id'), name='uniq_completed_purchase_per_order'),
                    models.UniqueConstraint(condition=models.Q(('status', 'completed')), fields=('user', 'product_ref'), name='uniq_completed_purchase_per_product'),
                ],
            },
        ),
    ]
