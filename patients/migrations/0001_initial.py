from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Patient',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('record_number', models.CharField(editable=False, help_text='Sequential record number, PT-YYYY-NNNNN', max_length=20, unique=True)),
                ('name', models.CharField(db_index=True, max_length=256)),
                ('date_of_birth', models.DateField()),
                ('address', models.TextField(blank=True)),
                ('initial_diagnosis', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
    ]
