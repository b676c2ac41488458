from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('projects', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Task',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200)),
                ('code', models.CharField(blank=True, max_length=50)),
                ('description', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('01.Task not started', 'Not started'), ('02.Task is started', 'In progress'), ('02a.On Hold', 'On hold'), ('02b.Blocked', 'Blocked'), ('03.User - Testing', 'User - Testing'), ('04.Update', 'Update'), ('05.Completed', 'Completed')], default='01.Task not started', max_length=30)),
                ('type', models.CharField(choices=[('task', 'Task'), ('risk', 'Risk (BLOCKED)'), ('issue', 'Issue')], default='task', max_length=10)),
                ('severity', models.CharField(blank=True, choices=[('Critical', 'Critical'), ('High', 'High'), ('Medium', 'Medium'), ('Low', 'Low')], max_length=10, null=True)),
                ('priority', models.CharField(choices=[('Low', 'Low'), ('Medium', 'Medium'), ('High', 'High'), ('Urgent', 'Urgent')], default='Medium', max_length=10)),
                ('deadline', models.DateField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('time_spent', models.FloatField(blank=True, null=True)),
                ('time_saved', models.FloatField(blank=True, null=True)),
                ('completion_reference', models.CharField(blank=True, max_length=255)),
                ('status_reason', models.TextField(blank=True)),
                ('comments', models.TextField(blank=True)),
                ('user_requirements', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('assignee', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_tasks', to='core.member')),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='tasks', to='projects.project')),
            ],
            options={
                'ordering': ['deadline', 'id'],
            },
        ),
    ]
