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
            name='Member',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('role', models.CharField(choices=[('MD', 'MD'), ('Director', 'Director'), ('Admin Manager', 'Admin Manager'), ('Operation Manager', 'Operation Manager'), ('Super Leader', 'Super Leader'), ('Team Leader', 'Team Leader'), ('Sub-team Leader', 'Sub-team Leader'), ('Staff', 'Staff')], default='Staff', max_length=30)),
                ('title', models.CharField(blank=True, max_length=200)),
                ('office_location', models.CharField(blank=True, max_length=200)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='member', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
    ]
