"""
Testes do cálculo de idade e da leitura da data de nascimento.
"""
from datetime import date

import pytest

from app.core.errors import ValidationError
from app.core.normalizers import calculate_age, clean_text, parse_birth_date
from app.core.registration_state import ParticipantData


class TestCalculateAge:

    def test_birthday_today(self):
        assert calculate_age(date(2000, 6, 15), date(2024, 6, 15)) == 24

    def test_day_before_birthday(self):
        assert calculate_age(date(2000, 6, 15), date(2024, 6, 14)) == 23

    def test_day_after_birthday(self):
        assert calculate_age(date(2000, 6, 15), date(2024, 6, 16)) == 24

    def test_earlier_month(self):
        assert calculate_age(date(2000, 6, 15), date(2024, 5, 30)) == 23

    def test_leap_day_birth_before_march(self):
        """Nascido em 29/02: em 28/02 de ano não bissexto ainda não fez aniversário."""
        assert calculate_age(date(2000, 2, 29), date(2023, 2, 28)) == 22

    def test_leap_day_birth_on_march_first(self):
        assert calculate_age(date(2000, 2, 29), date(2023, 3, 1)) == 23

    def test_born_today(self):
        assert calculate_age(date(2024, 6, 15), date(2024, 6, 15)) == 0


class TestParseBirthDate:

    def test_plain_iso_date(self):
        assert parse_birth_date("2000-06-15") == date(2000, 6, 15)

    def test_iso_datetime(self):
        assert parse_birth_date("2000-06-15T08:00:00") == date(2000, 6, 15)

    def test_iso_datetime_utc_suffix(self):
        assert parse_birth_date("2000-06-15T00:00:00Z") == date(2000, 6, 15)

    def test_surrounding_spaces(self):
        assert parse_birth_date("  2000-06-15 ") == date(2000, 6, 15)

    @pytest.mark.parametrize("raw", ["", "   ", "15/06/2000", "ontem", "2000-13-01"])
    def test_invalid_raises_validation_error(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            parse_birth_date(raw)
        assert exc_info.value.message == "Data de nascimento inválida."


class TestParticipantData:

    def test_clean_text(self):
        assert clean_text("  Ana ") == "Ana"
        assert clean_text("   ") is None
        assert clean_text(None) is None

    def test_missing_fields_uses_api_names(self):
        data = ParticipantData(name="Ana", birth_date=" ", cpf="123")
        assert data.missing_fields() == ["birthDate", "church", "district", "whatsapp"]

    def test_complete_data_has_no_missing_fields(self, participant_data):
        assert participant_data.missing_fields() == []

    def test_cleaned_strips_values(self):
        data = ParticipantData(name="  Ana  ", church="")
        cleaned = data.cleaned()
        assert cleaned.name == "Ana"
        assert cleaned.church is None
