import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('patients', '0001_initial'),
        ('treatments', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Appointment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('appointment_date', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('blood_pressure', models.CharField(blank=True, help_text='Systolic/diastolic, e.g. 120/80', max_length=10)),
                ('respiration_rate', models.PositiveSmallIntegerField(blank=True, help_text='Breaths per minute', null=True, validators=[django.core.validators.MinValueValidator(1)])),
                ('heart_rate', models.PositiveSmallIntegerField(blank=True, help_text='Beats per minute', null=True, validators=[django.core.validators.MinValueValidator(40), django.core.validators.MaxValueValidator(220)])),
                ('borg_scale', models.PositiveSmallIntegerField(blank=True, help_text='Perceived exertion, 6 to 20', null=True, validators=[django.core.validators.MinValueValidator(6), django.core.validators.MaxValueValidator(20)])),
                ('status', models.CharField(choices=[('scheduled', 'Scheduled'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='completed', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='appointments', to='patients.patient')),
            ],
            options={
                'ordering': ['-appointment_date'],
            },
        ),
        migrations.CreateModel(
            name='AppointmentTreatment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('price_at_time', models.DecimalField(decimal_places=2, max_digits=10)),
                ('notes', models.TextField(blank=True)),
                ('appointment', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='treatment_lines', to='appointments.appointment')),
                ('treatment', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='appointment_lines', to='treatments.treatment')),
            ],
            options={
                'ordering': ['id'],
            },
        ),
        migrations.AddField(
            model_name='appointment',
            name='treatments',
            field=models.ManyToManyField(related_name='appointments', through='appointments.AppointmentTreatment', to='treatments.treatment'),
        ),
        migrations.AddConstraint(
            model_name='appointmenttreatment',
            constraint=models.UniqueConstraint(fields=('appointment', 'treatment'), name='unique_appointment_treatment'),
        ),
    ]
