# Generated migration for lifecycle, consent and audit models

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('accounts', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Lifecycle',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('active', 'Active'), ('death_reported', 'Death Reported'), ('consent_gathering', 'Consent Gathering'), ('opened', 'Opened')], default='active', max_length=30)),
                ('deletion_status', models.CharField(blank=True, choices=[('deletion_consent_gathering', 'Deletion Consent Gathering')], help_text='Only meaningful once the record is opened', max_length=30, null=True)),
                ('death_reported_at', models.DateTimeField(blank=True, null=True)),
                ('opened_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('consent_initiated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('creator', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='lifecycle', to=settings.AUTH_USER_MODEL)),
                ('death_reported_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'indexes': [models.Index(fields=['status'], name='lifecycle_l_status_9d03c1_idx')],
            },
        ),
        migrations.CreateModel(
            name='ConsentRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('decision', models.CharField(choices=[('pending', 'Pending'), ('agreed', 'Agreed'), ('declined', 'Declined')], default='pending', max_length=10)),
                ('decided_at', models.DateTimeField(blank=True, null=True)),
                ('auto_resolved', models.BooleanField(default=False, help_text='Agreed automatically because the voter is deceased')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('family_member', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='consentrecords', to='accounts.familymember')),
                ('lifecycle', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='consentrecords', to='lifecycle.lifecycle')),
            ],
            options={
                'abstract': False,
                'unique_together': {('lifecycle', 'family_member')},
            },
        ),
        migrations.CreateModel(
            name='DeletionConsentRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('decision', models.CharField(choices=[('pending', 'Pending'), ('agreed', 'Agreed'), ('declined', 'Declined')], default='pending', max_length=10)),
                ('decided_at', models.DateTimeField(blank=True, null=True)),
                ('auto_resolved', models.BooleanField(default=False, help_text='Agreed automatically because the voter is deceased')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('family_member', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='deletionconsentrecords', to='accounts.familymember')),
                ('lifecycle', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='deletionconsentrecords', to='lifecycle.lifecycle')),
            ],
            options={
                'abstract': False,
                'unique_together': {('lifecycle', 'family_member')},
            },
        ),
        migrations.CreateModel(
            name='LifecycleActionLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(max_length=50)),
                ('metadata', models.JSONField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('creator', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lifecycle_actions', to=settings.AUTH_USER_MODEL)),
                ('lifecycle', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='actions', to='lifecycle.lifecycle')),
                ('performed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['creator', 'created_at'], name='lifecycle_l_creator_2a6f80_idx')],
            },
        ),
    ]
