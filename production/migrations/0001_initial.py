import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="DailyProduction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uid", models.CharField(max_length=64, unique=True, verbose_name="Identificador")),
                ("date", models.DateField(verbose_name="Data")),
                (
                    "aviary",
                    models.CharField(
                        choices=[("A1", "Aviário 1"), ("A2", "Aviário 2"), ("A3", "Aviário 3"), ("A4", "Aviário 4")],
                        default="A1",
                        max_length=2,
                        verbose_name="Aviário",
                    ),
                ),
                ("batch_code", models.CharField(blank=True, max_length=64, verbose_name="Lote")),
                ("clean_eggs", models.PositiveIntegerField(default=0, verbose_name="Ovos limpos")),
                ("dirty_eggs", models.PositiveIntegerField(default=0, verbose_name="Ovos sujos")),
                ("cracked_eggs", models.PositiveIntegerField(default=0, verbose_name="Ovos trincados")),
                ("floor_eggs", models.PositiveIntegerField(default=0, verbose_name="Ovos de cama")),
                ("birds", models.PositiveIntegerField(default=0, verbose_name="Aves vivas")),
                ("egg_weight", models.FloatField(blank=True, null=True, verbose_name="Peso dos ovos (g)")),
                ("bird_weight", models.FloatField(blank=True, null=True, verbose_name="Peso das aves (g)")),
                ("mortality", models.PositiveIntegerField(default=0, verbose_name="Mortalidade")),
                ("observation", models.TextField(blank=True, verbose_name="Observação")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Registro de produção",
                "verbose_name_plural": "Registros de produção",
                "ordering": ("-date", "aviary"),
            },
        ),
        migrations.CreateModel(
            name="FlockCharacterization",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uid", models.CharField(max_length=64, unique=True, verbose_name="Identificador")),
                ("date", models.DateField(verbose_name="Data")),
                (
                    "aviary",
                    models.CharField(
                        choices=[("A1", "Aviário 1"), ("A2", "Aviário 2"), ("A3", "Aviário 3"), ("A4", "Aviário 4")],
                        default="A1",
                        max_length=2,
                        verbose_name="Aviário",
                    ),
                ),
                ("batch_code", models.CharField(max_length=64, verbose_name="Lote")),
                (
                    "week_age",
                    models.PositiveSmallIntegerField(
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="Idade (semanas)",
                    ),
                ),
                ("batch_weight", models.FloatField(verbose_name="Peso do lote (g)")),
                (
                    "uniformity",
                    models.FloatField(
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ],
                        verbose_name="Uniformidade (%)",
                    ),
                ),
                (
                    "feathering",
                    models.CharField(
                        choices=[
                            ("muito_bom", "Muito Bom"),
                            ("bom", "Bom"),
                            ("regular", "Regular"),
                            ("ruim", "Ruim"),
                            ("pessimo", "Péssimo"),
                        ],
                        default="bom",
                        max_length=16,
                        verbose_name="Empenamento",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Caracterização de lote",
                "verbose_name_plural": "Caracterizações de lote",
                "ordering": ("-date", "aviary"),
            },
        ),
    ]
