from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Project',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('code', models.CharField(blank=True, max_length=50)),
                ('description', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('Not started', 'Not started'), ('Started', 'Started'), ('User - Testing', 'User - Testing'), ('Update', 'Update'), ('Blocked', 'Blocked'), ('Completed', 'Completed'), ('Completed Blocked', 'Completed Blocked'), ('Completed, Not Satisfied', 'Completed, Not Satisfied')], default='Not started', max_length=30)),
                ('weight', models.FloatField(blank=True, help_text='% udziału w postępie rodzica', null=True)),
                ('phase', models.CharField(blank=True, max_length=100)),
                ('allocated_hours', models.FloatField(default=0)),
                ('used_hours', models.FloatField(default=0)),
                ('additional_hours', models.FloatField(default=0)),
                ('saved_hours', models.FloatField(default=0)),
                ('expected_saved_hours', models.FloatField(default=0)),
                ('timer_start_time', models.DateTimeField(blank=True, null=True)),
                ('start_date', models.DateField(blank=True, null=True)),
                ('target_end_date', models.DateField(blank=True, null=True)),
                ('milestone_date', models.DateField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('risk_level', models.CharField(choices=[('Low', 'Low'), ('Medium', 'Medium'), ('High', 'High')], default='Low', max_length=10)),
                ('overage_reason', models.TextField(blank=True)),
                ('frequency', models.CharField(blank=True, choices=[('Daily', 'Daily'), ('Weekly', 'Weekly'), ('Twice a month', 'Twice a month'), ('3 weeks once', '3 weeks once'), ('Monthly', 'Monthly'), ('Specific Dates', 'Specific Dates')], max_length=30, null=True)),
                ('frequency_detail', models.CharField(blank=True, max_length=255)),
                ('tools_used', models.JSONField(blank=True, default=list)),
                ('end_user_feedback', models.JSONField(blank=True, null=True)),
                ('latest_comments', models.JSONField(blank=True, null=True)),
                ('last_used_by', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('lead', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='led_projects', to='core.member')),
                ('parent_project', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='subprojects', to='projects.project')),
            ],
            options={
                'ordering': ['id'],
            },
        ),
    ]
