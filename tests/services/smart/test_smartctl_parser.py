"""
Tests for the smartctl text scanners.
"""

from storage_telemetry.services.smart.smartctl_parser import parse_health, parse_temperature

ATTRIBUTES_OUTPUT = """\
smartctl 7.3 2022-02-28 r5338 [x86_64-linux-6.1.0-18-amd64] (local build)
Copyright (C) 2002-22, Bruce Allen, Christian Franke, www.smartmontools.org

=== START OF READ SMART DATA SECTION ===
SMART Attributes Data Structure revision number: 16
Vendor Specific SMART Attributes with Thresholds:
ID# ATTRIBUTE_NAME          FLAG     VALUE WORST THRESH TYPE      UPDATED  WHEN_FAILED RAW_VALUE
  1 Raw_Read_Error_Rate     0x002f   200   200   051    Pre-fail  Always       -       0
  9 Power_On_Hours          0x0032   061   061   000    Old_age   Always       -       28834
190 Airflow_Temperature_Cel 0x0022   066   052   045    Old_age   Always       -       34
194 Temperature_Celsius     0x0022   114   098   000    Old_age   Always       -       36 (Min/Max 18/52)
"""

HEALTH_PASSED_OUTPUT = """\
smartctl 7.3 2022-02-28 r5338 [x86_64-linux-6.1.0-18-amd64] (local build)

=== START OF READ SMART DATA SECTION ===
SMART overall-health self-assessment test result: PASSED
"""


class TestParseTemperature:
    def test_reads_raw_value_of_attribute_194(self):
        assert parse_temperature(ATTRIBUTES_OUTPUT) == 36

    def test_temperature_internal_name_is_accepted(self):
        line = "194 Temperature_Internal    0x0022   100   100   000    Old_age   Always       -       41\n"
        assert parse_temperature(line) == 41

    def test_airflow_attribute_alone_is_not_used(self):
        output = "190 Airflow_Temperature_Cel 0x0022   066   052   045    Old_age   Always       -       34\n"
        assert parse_temperature(output) is None

    def test_194_with_other_name_is_ignored(self):
        output = "194 Unknown_Attribute       0x0022   100   100   000    Old_age   Always       -       41\n"
        assert parse_temperature(output) is None

    def test_unparseable_raw_value_leaves_temperature_unknown(self):
        output = "194 Temperature_Celsius     0x0022   114   098   000    Old_age   Always       -       n/a\n"
        assert parse_temperature(output) is None

    def test_first_readable_row_wins(self):
        output = (
            "194 Temperature_Celsius     0x0022   114   098   000    Old_age   Always       -       bad\n"
            "194 Temperature_Celsius     0x0022   114   098   000    Old_age   Always       -       38\n"
            "194 Temperature_Celsius     0x0022   114   098   000    Old_age   Always       -       39\n"
        )
        assert parse_temperature(output) == 38

    def test_empty_output(self):
        assert parse_temperature("") is None


class TestParseHealth:
    def test_passed(self):
        record = parse_health(HEALTH_PASSED_OUTPUT)

        assert record.overall_status == "PASSED"
        assert record.healthy is True
        assert record.temperature is None

    def test_failed(self):
        record = parse_health("SMART overall-health self-assessment test result: FAILED!\n")

        assert record.overall_status == "FAILED"
        assert record.healthy is False

    def test_status_is_case_insensitive(self):
        record = parse_health("smart overall-health self-assessment test result: passed\n")

        assert record.overall_status == "PASSED"
        assert record.healthy is True

    def test_unrecognized_status_is_unhealthy(self):
        record = parse_health("SMART overall-health self-assessment test result: IN_PROGRESS\n")

        assert record.overall_status == "IN_PROGRESS"
        assert record.healthy is False

    def test_no_verdict_means_unknown(self):
        record = parse_health("SMART support is: Unavailable - device lacks SMART capability.\n")

        assert record.is_empty

    def test_rules_are_independent(self):
        # Health text without attribute table and vice versa
        assert parse_temperature(HEALTH_PASSED_OUTPUT) is None
        assert parse_health(ATTRIBUTES_OUTPUT).is_empty
