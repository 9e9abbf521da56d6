from __future__ import annotations

from datetime import date
from unittest import mock

from django.test import SimpleTestCase

from production.models import Aviary, FeatheringQuality
from production.services.csv_parser import (
    CHARACTERIZATION_HEADER_RULES,
    PRODUCTION_HEADER_RULES,
    detect_delimiter,
    map_headers,
    match_aviary,
    match_feathering,
    parse_characterization_csv,
    parse_nullable_number,
    parse_number,
    parse_production_csv,
    split_csv_line,
    split_lines,
)

PRODUCTION_HEADER = (
    "ID;Data;Aviário;Lote;Ovos Limpos;Ovos Sujos;Ovos Trincados;Ovos de Cama;"
    "Aves Vivas;Peso Ovos (g);Peso Aves (g);Mortalidade;Observação"
)

CHARACTERIZATION_HEADER = "ID;Data;Aviário;Lote;Idade Semanas;Peso Lote (g);Uniformidade (%);Empenamento"


class TokenizerTests(SimpleTestCase):
    def test_delimiter_is_literal_inside_quotes(self) -> None:
        tokens = split_csv_line('a;"b;c";"say ""hi""";  d  ', ";")

        self.assertEqual(tokens, ["a", "b;c", 'say "hi"', "d"])

    def test_delimiter_detection(self) -> None:
        self.assertEqual(detect_delimiter("Data;Aviário"), ";")
        self.assertEqual(detect_delimiter("Data,Aviário"), ",")

    def test_lines_drop_blanks_and_byte_order_mark(self) -> None:
        lines = split_lines("\ufeffData;Aviário\r\n2024-01-01;1\n\n   \r\n")

        self.assertEqual(lines, ["Data;Aviário", "2024-01-01;1"])

    def test_numbers_accept_decimal_comma_and_degrade_quietly(self) -> None:
        self.assertEqual(parse_number("62,5"), 62.5)
        self.assertEqual(parse_number(" 12 "), 12.0)
        self.assertEqual(parse_number("abc"), 0.0)
        self.assertEqual(parse_number(None), 0.0)
        self.assertIsNone(parse_nullable_number(""))
        self.assertIsNone(parse_nullable_number("nan"))
        self.assertEqual(parse_nullable_number("1850"), 1850.0)

    def test_thousands_separator_is_not_understood(self) -> None:
        self.assertEqual(parse_number("1.234,5"), 0.0)
        self.assertIsNone(parse_nullable_number("1.234,5"))
        self.assertEqual(parse_number("1234,5"), 1234.5)


class HeaderMappingTests(SimpleTestCase):
    def test_production_headers_are_resolved_with_accents_folded(self) -> None:
        columns = map_headers(split_csv_line(PRODUCTION_HEADER, ";"), PRODUCTION_HEADER_RULES)

        self.assertEqual(
            columns,
            {
                "identifier": 0,
                "date": 1,
                "aviary": 2,
                "batch_id": 3,
                "clean": 4,
                "dirty": 5,
                "cracked": 6,
                "floor_eggs": 7,
                "birds": 8,
                "egg_weight": 9,
                "bird_weight": 10,
                "mortality": 11,
                "observation": 12,
            },
        )

    def test_uniformity_is_not_mistaken_for_week_age(self) -> None:
        columns = map_headers(["Uniformidade", "Idade", "Peso Lote", "Lote"], CHARACTERIZATION_HEADER_RULES)

        self.assertEqual(columns["uniformity"], 0)
        self.assertEqual(columns["week_age"], 1)
        self.assertEqual(columns["batch_weight"], 2)
        self.assertEqual(columns["batch_id"], 3)

    def test_unmatched_fields_are_left_out(self) -> None:
        columns = map_headers(["Data", "Aviário"], PRODUCTION_HEADER_RULES)

        self.assertEqual(columns, {"date": 0, "aviary": 1})


class CategoryMatchingTests(SimpleTestCase):
    def test_aviary_digit_matching(self) -> None:
        self.assertEqual(match_aviary("Aviário 3"), Aviary.A3)
        self.assertEqual(match_aviary("A4"), Aviary.A4)
        self.assertEqual(match_aviary("Galpão"), Aviary.A1)
        self.assertEqual(match_aviary(None), Aviary.A1)

    def test_feathering_prefers_the_longer_phrase(self) -> None:
        self.assertEqual(match_feathering("Muito Bom"), FeatheringQuality.VERY_GOOD)
        self.assertEqual(match_feathering("bom"), FeatheringQuality.GOOD)
        self.assertEqual(match_feathering("REGULAR"), FeatheringQuality.REGULAR)
        self.assertEqual(match_feathering("Ruim"), FeatheringQuality.POOR)
        self.assertEqual(match_feathering("Péssimo"), FeatheringQuality.VERY_POOR)
        self.assertEqual(match_feathering("pessimo"), FeatheringQuality.VERY_POOR)
        self.assertEqual(match_feathering("???"), FeatheringQuality.GOOD)


class ProductionCsvTests(SimpleTestCase):
    def test_parses_bom_semicolons_decimal_commas_and_trailing_blank_line(self) -> None:
        text = (
            "\ufeff" + PRODUCTION_HEADER + "\r\n"
            'rec-0001;05/03/2024;Aviário 2;L1;900;30;10;5;1000;62,5;1850;2;"Bebedouro; trocado"\r\n'
            "rec-0002;06/03/2024;Aviário 1;L1;850;20;5;;950;;;0;\r\n"
            "\r\n"
        )

        records = parse_production_csv(text)

        self.assertEqual(len(records), 2)
        first, second = records
        self.assertEqual(first.identifier, "rec-0001")
        self.assertEqual(first.date, "2024-03-05")
        self.assertEqual(first.aviary, Aviary.A2)
        self.assertEqual(first.batch_id, "L1")
        self.assertEqual((first.clean, first.dirty, first.cracked, first.floor_eggs), (900, 30, 10, 5))
        self.assertEqual(first.birds, 1000)
        self.assertEqual(first.egg_weight, 62.5)
        self.assertEqual(first.bird_weight, 1850.0)
        self.assertEqual(first.mortality, 2)
        self.assertEqual(first.observation, "Bebedouro; trocado")
        self.assertEqual(second.floor_eggs, 0)
        self.assertIsNone(second.egg_weight)
        self.assertIsNone(second.bird_weight)
        self.assertIsNone(second.observation)

    def test_comma_delimited_file_with_iso_dates(self) -> None:
        text = "Data,Aviario,Ovos Limpos,Aves Vivas\n2024-03-05,A4,100,120\n"

        records = parse_production_csv(text)

        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].date, "2024-03-05")
        self.assertEqual(records[0].aviary, Aviary.A4)
        self.assertEqual(records[0].clean, 100)
        self.assertEqual(records[0].birds, 120)
        self.assertIsNone(records[0].batch_id)

    def test_short_ids_are_replaced(self) -> None:
        text = PRODUCTION_HEADER + "\n12;05/03/2024;Aviário 1;L1;10;0;0;0;20;;;0;\n"

        records = parse_production_csv(text)

        self.assertNotEqual(records[0].identifier, "12")
        self.assertEqual(len(records[0].identifier), 36)

    def test_short_footer_and_invalid_rows_are_skipped(self) -> None:
        text = (
            PRODUCTION_HEADER + "\n"
            "rec-0001;05/03/2024;Aviário 1;L1;10;0;0;0;20;;;0;\n"
            "Total;0\n"
            ";;;;;;;;;;;;\n"
            "rec-0003;31/02/2024;Aviário 1;L1;10;0;0;0;20;;;0;\n"
        )

        records = parse_production_csv(text)

        self.assertEqual([record.identifier for record in records], ["rec-0001"])

    def test_blank_date_with_data_falls_back_to_today(self) -> None:
        text = PRODUCTION_HEADER + "\nrec-0001;;Aviário 1;L1;10;0;0;0;20;;;0;\n"

        with mock.patch("production.services.periods.timezone.localdate", return_value=date(2024, 3, 20)):
            records = parse_production_csv(text)

        self.assertEqual(records[0].date, "2024-03-20")

    def test_garbage_numbers_default_instead_of_failing(self) -> None:
        text = PRODUCTION_HEADER + "\nrec-0001;05/03/2024;Aviário 1;L1;abc;1,5;;0;20;x;;;\n"

        record = parse_production_csv(text)[0]

        self.assertEqual(record.clean, 0)
        self.assertEqual(record.dirty, 1)
        self.assertEqual(record.cracked, 0)
        self.assertIsNone(record.egg_weight)
        self.assertEqual(record.mortality, 0)

    def test_negative_counts_are_clamped_to_zero(self) -> None:
        text = PRODUCTION_HEADER + "\nrec-0001;05/03/2024;Aviário 2;L1;-5;-1,5;3;-2;100;;;-4;\n"

        record = parse_production_csv(text)[0]

        self.assertEqual((record.clean, record.dirty, record.cracked), (0, 0, 3))
        self.assertEqual(record.floor_eggs, 0)
        self.assertEqual(record.birds, 100)
        self.assertEqual(record.mortality, 0)

    def test_header_only_file_has_no_records(self) -> None:
        self.assertEqual(parse_production_csv(PRODUCTION_HEADER), [])
        self.assertEqual(parse_production_csv(""), [])


class CharacterizationCsvTests(SimpleTestCase):
    def test_parses_snapshots_and_skips_rows_without_age(self) -> None:
        text = (
            CHARACTERIZATION_HEADER + "\n"
            "char-001;01/03/2024;Aviário 3;L9;30;1750,5;88,2;Muito Bom\n"
            "char-002;02/03/2024;Aviário 3;L9;0;1750;88;Bom\n"
            "char-003;03/03/2024;Aviário 4;L7;31;1800;90;Péssimo\n"
        )

        snapshots = parse_characterization_csv(text)

        self.assertEqual([snapshot.identifier for snapshot in snapshots], ["char-001", "char-003"])
        first = snapshots[0]
        self.assertEqual(first.date, "2024-03-01")
        self.assertEqual(first.aviary, Aviary.A3)
        self.assertEqual(first.batch_id, "L9")
        self.assertEqual(first.week_age, 30)
        self.assertEqual(first.batch_weight, 1750.5)
        self.assertEqual(first.uniformity, 88.2)
        self.assertEqual(first.feathering, FeatheringQuality.VERY_GOOD)
        self.assertEqual(snapshots[1].feathering, FeatheringQuality.VERY_POOR)

    def test_missing_feathering_column_defaults_to_good(self) -> None:
        text = "Data;Aviário;Lote;Idade\n01/03/2024;Aviário 2;L1;25\n"

        snapshot = parse_characterization_csv(text)[0]

        self.assertEqual(snapshot.feathering, FeatheringQuality.GOOD)
        self.assertEqual(snapshot.batch_weight, 0.0)
        self.assertEqual(snapshot.week_age, 25)
