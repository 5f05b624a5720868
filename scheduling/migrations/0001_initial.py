import uuid

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='ClassSeries',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('gym_id', models.UUIDField(db_index=True)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True, null=True)),
                ('class_type_id', models.UUIDField()),
                ('location_id', models.UUIDField()),
                ('coach_id', models.UUIDField(blank=True, null=True)),
                ('capacity', models.PositiveIntegerField()),
                ('recurrence_type', models.CharField(choices=[('daily', 'Daily'), ('weekly', 'Weekly'), ('monthly', 'Monthly')], max_length=20)),
                ('recurrence_days', models.JSONField(blank=True, default=list, help_text='ISO weekdays for weekly series (1=Monday, 7=Sunday)')),
                ('start_date', models.DateField()),
                ('end_date', models.DateField(blank=True, help_text='Last date of the series (null = start date plus the generation horizon)', null=True)),
                ('start_time', models.TimeField(help_text='Wall-clock start, identical for every occurrence')),
                ('end_time', models.TimeField(help_text='Wall-clock end, identical for every occurrence')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name_plural': 'class series',
                'ordering': ['start_date', 'start_time'],
                'indexes': [models.Index(fields=['gym_id', 'start_date'], name='series_gym_start_idx')],
            },
        ),
        migrations.CreateModel(
            name='GymClass',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('gym_id', models.UUIDField(db_index=True)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True, null=True)),
                ('class_type_id', models.UUIDField()),
                ('location_id', models.UUIDField()),
                ('coach_id', models.UUIDField(blank=True, null=True)),
                ('capacity', models.PositiveIntegerField()),
                ('start_time', models.DateTimeField()),
                ('end_time', models.DateTimeField()),
                ('status', models.CharField(choices=[('scheduled', 'Scheduled'), ('cancelled', 'Cancelled'), ('completed', 'Completed')], default='scheduled', max_length=20)),
                ('is_recurring', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('series', models.ForeignKey(blank=True, help_text='Parent series (null for standalone or detached classes)', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='classes', to='scheduling.classseries')),
            ],
            options={
                'verbose_name_plural': 'gym classes',
                'ordering': ['start_time'],
                'indexes': [
                    models.Index(fields=['location_id', 'start_time', 'end_time'], name='class_location_window_idx'),
                    models.Index(fields=['coach_id', 'start_time', 'end_time'], name='class_coach_window_idx'),
                    models.Index(fields=['series', 'start_time'], name='class_series_start_idx'),
                    models.Index(fields=['gym_id', 'start_time'], name='class_gym_start_idx'),
                ],
            },
        ),
    ]
