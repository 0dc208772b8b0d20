"""Unit tests for slug, date and time normalizers."""
import pytest

from processor.errors import InvalidDate, InvalidTime, ValidationError
from processor.normalize import normalize_date, normalize_time, slugify


class TestSlugify:
    """Test cases for slugify."""

    def test_folds_accents_and_collapses_punctuation(self):
        """Test accented letters fold and punctuation runs become one dash."""
        assert slugify("Café  &  Code!!") == "cafe-code"

    def test_lowercases_and_trims_dashes(self):
        """Test leading and trailing separators are dropped."""
        assert slugify("  --Hello World--  ") == "hello-world"

    def test_keeps_digits(self):
        """Test digits survive slug generation."""
        assert slugify("PyCon DE 2024") == "pycon-de-2024"

    def test_all_punctuation_is_empty(self):
        """Test input without letters or digits yields an empty slug."""
        assert slugify("!!! ???") == ""
        assert slugify("") == ""

    @pytest.mark.parametrize("slug", ["cafe-code", "a", "2024-python-day"])
    def test_idempotent_on_slugs(self, slug):
        """Test slugify leaves an existing slug unchanged."""
        assert slugify(slugify(slug)) == slugify(slug) == slug

    def test_non_latin_letters_become_separators(self):
        """Test letters outside a-z after folding act as separators."""
        assert slugify("Ñandú über Straße") == "nandu-uber-stra-e"


class TestNormalizeDate:
    """Test cases for normalize_date."""

    def test_iso_date(self):
        """Test date normalization with ISO 8601 format."""
        assert normalize_date("2024-01-15") == "2024-01-15"

    def test_iso_datetime_with_zulu(self):
        """Test time-of-day and Z offset are discarded."""
        assert normalize_date("2024-03-05T10:00:00Z") == "2024-03-05"

    def test_offset_converted_to_utc_date(self):
        """Test offset-aware values take the UTC calendar date."""
        assert normalize_date("2024-03-05T23:30:00-05:00") == "2024-03-06"

    def test_us_format(self):
        """Test date normalization with US format."""
        assert normalize_date("01/15/2024") == "2024-01-15"

    def test_ambiguous_format_reads_month_first(self):
        """Test 03/05/2024 is March 5th."""
        assert normalize_date("03/05/2024") == "2024-03-05"

    def test_day_first_when_month_first_impossible(self):
        """Test European format is used when US format cannot apply."""
        assert normalize_date("25/12/2024") == "2024-12-25"

    def test_unpadded_iso_date(self):
        """Test ISO dates without zero padding are accepted."""
        assert normalize_date("2024-3-5") == "2024-03-05"

    def test_weekday_prefixed_date(self):
        """Test the weekday, month, day, year form."""
        assert normalize_date("Tue Mar 05 2024") == "2024-03-05"

    def test_abbreviated_month_with_time(self):
        """Test an abbreviated month date followed by a 24-hour time."""
        assert normalize_date("Mar 5 2024 10:00") == "2024-03-05"

    def test_full_month_name(self):
        """Test date normalization with full month name."""
        assert normalize_date("January 15, 2024") == "2024-01-15"

    def test_abbreviated_month_name(self):
        """Test date normalization with abbreviated month name."""
        assert normalize_date("Mar 5, 2024") == "2024-03-05"

    def test_surrounding_whitespace(self):
        """Test surrounding whitespace is ignored."""
        assert normalize_date("  2024-01-15 ") == "2024-01-15"

    @pytest.mark.parametrize("raw", ["not-a-date", "", "   ", "2024-02-30", "13/13/2024"])
    def test_invalid_dates(self, raw):
        """Test unparseable dates raise InvalidDate."""
        with pytest.raises(InvalidDate) as exc_info:
            normalize_date(raw)
        assert exc_info.value.field == 'date'

    def test_non_text_is_invalid(self):
        """Test a non-string value raises InvalidDate."""
        with pytest.raises(InvalidDate):
            normalize_date(None)


class TestNormalizeTime:
    """Test cases for normalize_time."""

    def test_bare_pm_hour(self):
        """Test an hour with meridiem and no minutes."""
        assert normalize_time("6pm") == "18:00"

    def test_range_with_meridiem(self):
        """Test a 12-hour range converts both ends."""
        assert normalize_time("9:30am-11:00am") == "09:30-11:00"

    def test_range_with_spaces(self):
        """Test whitespace around the range dash and before meridiem."""
        assert normalize_time(" 10:00 AM - 2:00 PM ") == "10:00-14:00"

    def test_24_hour_format(self):
        """Test time normalization with 24-hour format."""
        assert normalize_time("19:00") == "19:00"

    def test_pads_single_digits(self):
        """Test hour and minute are zero padded."""
        assert normalize_time("7:5") == "07:05"

    def test_midnight_and_noon(self):
        """Test 12am is 00 and 12pm stays 12."""
        assert normalize_time("12am") == "00:00"
        assert normalize_time("12:15PM") == "12:15"

    def test_range_end_before_start_is_allowed(self):
        """Test ranges are not checked for order."""
        assert normalize_time("22:00-06:00") == "22:00-06:00"

    @pytest.mark.parametrize("raw", ["25:00", "13pm", "10:60", "invalid-time", "", "7:00:00"])
    def test_invalid_times(self, raw):
        """Test malformed or out-of-range times raise InvalidTime."""
        with pytest.raises(InvalidTime):
            normalize_time(raw)

    def test_too_many_range_parts(self):
        """Test more than two range parts raises InvalidTime."""
        with pytest.raises(InvalidTime) as exc_info:
            normalize_time("a-b-c")
        assert 'range' in exc_info.value.reason

    def test_invalid_time_is_validation_error(self):
        """Test InvalidTime belongs to the validation error family."""
        with pytest.raises(ValidationError):
            normalize_time("noon")
