# Generated manually for the HouseParty catalog app

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Kit',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True)),
                ('rarity', models.CharField(choices=[('common', 'Common'), ('rare', 'Rare'), ('epic', 'Epic'), ('legendary', 'Legendary'), ('mythic', 'Mythic')], default='common', max_length=20)),
                ('unlock_type', models.CharField(choices=[('free', 'Free'), ('purchasable', 'Purchasable'), ('chance_based', 'Chance based')], default='purchasable', max_length=20)),
                ('price_cents', models.PositiveIntegerField(default=0)),
                ('color_scheme', models.JSONField(blank=True, default=list)),
                ('items', models.JSONField(blank=True, default=list)),
                ('is_available', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'house_kits',
                'ordering': ['price_cents', 'name'],
                'indexes': [
                    models.Index(fields=['is_available', 'price_cents'], name='house_kits_avail_price_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='UserKit',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('is_active', models.BooleanField(default=False)),
                ('unlocked_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('kit', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='owners', to='catalog.kit')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='owned_kits', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'user_house_kits',
                'ordering': ['-unlocked_at'],
                'unique_together': {('user', 'kit')},
                'indexes': [
                    models.Index(fields=['user', 'is_active'], name='user_kits_user_active_idx'),
                ],
            },
        ),
    ]
