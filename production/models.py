from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Aviary(models.TextChoices):
    A1 = "A1", "Aviário 1"
    A2 = "A2", "Aviário 2"
    A3 = "A3", "Aviário 3"
    A4 = "A4", "Aviário 4"


# Floor eggs are only tracked where the hens are not caged.
CAGE_FREE_AVIARIES = frozenset({Aviary.A2, Aviary.A4})


def is_cage_free(aviary: str) -> bool:
    return aviary in CAGE_FREE_AVIARIES


class FeatheringQuality(models.TextChoices):
    """Feathering categories, declared from best to worst."""

    VERY_GOOD = "muito_bom", "Muito Bom"
    GOOD = "bom", "Bom"
    REGULAR = "regular", "Regular"
    POOR = "ruim", "Ruim"
    VERY_POOR = "pessimo", "Péssimo"


class DailyProduction(models.Model):
    uid = models.CharField("Identificador", max_length=64, unique=True)
    date = models.DateField("Data")
    aviary = models.CharField("Aviário", max_length=2, choices=Aviary.choices, default=Aviary.A1)
    batch_code = models.CharField("Lote", max_length=64, blank=True)
    clean_eggs = models.PositiveIntegerField("Ovos limpos", default=0)
    dirty_eggs = models.PositiveIntegerField("Ovos sujos", default=0)
    cracked_eggs = models.PositiveIntegerField("Ovos trincados", default=0)
    floor_eggs = models.PositiveIntegerField("Ovos de cama", default=0)
    birds = models.PositiveIntegerField("Aves vivas", default=0)
    egg_weight = models.FloatField("Peso dos ovos (g)", null=True, blank=True)
    bird_weight = models.FloatField("Peso das aves (g)", null=True, blank=True)
    mortality = models.PositiveIntegerField("Mortalidade", default=0)
    observation = models.TextField("Observação", blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Registro de produção"
        verbose_name_plural = "Registros de produção"
        ordering = ("-date", "aviary")

    def __str__(self) -> str:
        return f"{self.date:%d/%m/%Y} · {self.get_aviary_display()}"

    def clean(self) -> None:
        super().clean()
        errors: dict[str, str] = {}
        if not (self.batch_code or "").strip():
            errors["batch_code"] = (
                "Nenhum lote ativo encontrado. Cadastre uma caracterização para este aviário/data."
            )
        if (self.birds or 0) <= 0:
            errors["birds"] = "Mínimo 1 ave viva necessária."
        if (self.floor_eggs or 0) > 0 and not is_cage_free(self.aviary):
            errors["floor_eggs"] = "Ovos de cama só são registrados em aviários livres de gaiola."
        for field_name in ("egg_weight", "bird_weight"):
            value = getattr(self, field_name)
            if value is not None and value < 0:
                errors[field_name] = "Não pode ser negativo."
        if errors:
            raise ValidationError(errors)


class FlockCharacterization(models.Model):
    uid = models.CharField("Identificador", max_length=64, unique=True)
    date = models.DateField("Data")
    aviary = models.CharField("Aviário", max_length=2, choices=Aviary.choices, default=Aviary.A1)
    batch_code = models.CharField("Lote", max_length=64)
    week_age = models.PositiveSmallIntegerField("Idade (semanas)", validators=[MinValueValidator(1)])
    batch_weight = models.FloatField("Peso do lote (g)")
    uniformity = models.FloatField(
        "Uniformidade (%)",
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    feathering = models.CharField(
        "Empenamento",
        max_length=16,
        choices=FeatheringQuality.choices,
        default=FeatheringQuality.GOOD,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Caracterização de lote"
        verbose_name_plural = "Caracterizações de lote"
        ordering = ("-date", "aviary")

    def __str__(self) -> str:
        return f"Lote {self.batch_code} · {self.get_aviary_display()} · {self.date:%d/%m/%Y}"

    def clean(self) -> None:
        super().clean()
        errors: dict[str, str] = {}
        if not (self.batch_code or "").strip():
            errors["batch_code"] = "Número do lote é obrigatório."
        if (self.week_age or 0) <= 0:
            errors["week_age"] = "Idade do lote deve ser maior que 0."
        if (self.batch_weight or 0) <= 0:
            errors["batch_weight"] = "Peso do lote é obrigatório."
        if self.uniformity is None or not 0 <= self.uniformity <= 100:
            errors["uniformity"] = "Uniformidade deve ser entre 0 e 100%."
        if errors:
            raise ValidationError(errors)
