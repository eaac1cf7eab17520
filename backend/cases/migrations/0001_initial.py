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
            name='Case',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated At')),
                ('owner_name', models.CharField(max_length=150, verbose_name='Owner Name')),
                ('owner_phone', models.CharField(blank=True, default='', max_length=20, verbose_name='Owner Phone')),
                ('symptoms', models.TextField(verbose_name='Symptoms')),
                ('severity', models.CharField(choices=[('low', 'Low'), ('mid', 'Medium'), ('high', 'High')], db_index=True, max_length=10, verbose_name='Severity')),
                ('latitude', models.FloatField(blank=True, null=True, verbose_name='Latitude')),
                ('longitude', models.FloatField(blank=True, null=True, verbose_name='Longitude')),
                ('image_url', models.URLField(blank=True, default='', max_length=500, verbose_name='Photo URL')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('accepted', 'Accepted'), ('on_way', 'Responder On The Way'), ('escalated', 'Escalated To Seniors'), ('resolved', 'Resolved')], db_index=True, default='pending', max_length=20, verbose_name='Current Status')),
                ('assigned_responder_name', models.CharField(blank=True, default='', max_length=150)),
                ('assigned_responder_tier', models.CharField(blank=True, default='', max_length=10)),
                ('help_type', models.CharField(blank=True, choices=[('remote', 'Remote Advice'), ('in_person', 'In-Person Assistance')], default='', max_length=10, verbose_name='Help Type')),
                ('is_escalated', models.BooleanField(default=False, verbose_name='Awaiting Senior')),
                ('advice', models.TextField(blank=True, default='', verbose_name='Advice')),
                ('volunteer_notes', models.TextField(blank=True, default='', verbose_name='Responder Instructions')),
                ('current_distance_km', models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True, verbose_name='Responder Distance (km)')),
                ('location_updated_at', models.DateTimeField(blank=True, null=True)),
                ('is_archived', models.BooleanField(default=False, verbose_name='Archived')),
                ('is_deleted', models.BooleanField(default=False, verbose_name='In Trash')),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('last_updated', models.DateTimeField(blank=True, null=True, verbose_name='Last Transition')),
                ('resolved_at', models.DateTimeField(blank=True, null=True, verbose_name='Resolved At')),
                ('assigned_responder', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_cases', to=settings.AUTH_USER_MODEL, verbose_name='Assigned Responder')),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='owned_cases', to=settings.AUTH_USER_MODEL, verbose_name='Owner')),
                ('prior_assignee', models.ForeignKey(blank=True, help_text='Student who triaged and escalated the case.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='escalated_cases', to=settings.AUTH_USER_MODEL, verbose_name='Prior Assignee')),
            ],
            options={
                'verbose_name': 'Case',
                'verbose_name_plural': 'Cases',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'severity'], name='cases_case_status_5c1f2e_idx'),
                    models.Index(fields=['owner', 'is_deleted'], name='cases_case_owner_i_8d0a4b_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CaseStatusLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated At')),
                ('from_status', models.CharField(blank=True, choices=[('pending', 'Pending'), ('accepted', 'Accepted'), ('on_way', 'Responder On The Way'), ('escalated', 'Escalated To Seniors'), ('resolved', 'Resolved')], max_length=20, verbose_name='Previous Status')),
                ('to_status', models.CharField(choices=[('pending', 'Pending'), ('accepted', 'Accepted'), ('on_way', 'Responder On The Way'), ('escalated', 'Escalated To Seniors'), ('resolved', 'Resolved')], max_length=20, verbose_name='New Status')),
                ('message', models.TextField(blank=True, default='', verbose_name='Message')),
                ('case', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='status_logs', to='cases.case', verbose_name='Case')),
                ('changed_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='case_status_changes', to=settings.AUTH_USER_MODEL, verbose_name='Changed By')),
            ],
            options={
                'verbose_name': 'Case Status Log',
                'verbose_name_plural': 'Case Status Logs',
                'ordering': ['-created_at', '-pk'],
            },
        ),
    ]
