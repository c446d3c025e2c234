"""Tests for period aggregation of hourly forecasts."""

from datetime import UTC, datetime

import pytest

from models.forecast import HourlySample, SnowQuality
from models.provider import HourlySeries, PointResponse
from services.period_aggregation_service import (
    _mode,
    aggregate_forecast,
    aggregate_period,
    hourly_samples,
)

START = int(datetime(2026, 1, 15, tzinfo=UTC).timestamp())
HOUR = 3600


def _sample(**overrides) -> HourlySample:
    values = {
        "wind_speed": 10.0,
        "wind_direction": 270.0,
        "temperature": -5.0,
        "humidity": 80.0,
        "precipitation": 0.0,
        "weather_code": 3.0,
        "surface_pressure": 850.0,
        "rain": 0.0,
        "snowfall": 0.0,
    }
    values.update(overrides)
    return HourlySample(**values)


class TestMode:
    """Tests for the most-frequent-value helper."""

    def test_single_mode(self):
        assert _mode([3.0, 3.0, 71.0]) == 3.0

    def test_tie_goes_to_larger_value(self):
        assert _mode([180.0, 180.0, 270.0, 270.0, 90.0, 90.0]) == 270.0

    def test_tie_independent_of_order(self):
        assert _mode([270.0, 90.0, 90.0, 270.0]) == 270.0

    def test_empty(self):
        assert _mode([]) is None


class TestHourlySamples:
    """Tests for splitting a series into samples."""

    def test_one_sample_per_step(self, make_main_response):
        response = make_main_response(hours=5, temperature=[1.0, 2.0, 3.0, 4.0, 5.0])

        samples = hourly_samples(response.hourly)

        assert len(samples) == 5
        assert [s.temperature for s in samples] == [1.0, 2.0, 3.0, 4.0, 5.0]

    def test_short_variable_lists_read_as_missing(self):
        series = HourlySeries(
            time=START,
            time_end=START + 3 * HOUR,
            interval=HOUR,
            variables=[[5.0, 6.0, 7.0], [90.0]],
        )

        samples = hourly_samples(series)

        assert len(samples) == 3
        assert samples[0].wind_direction == 90.0
        assert samples[1].wind_direction is None
        assert samples[2].wind_speed == 7.0
        assert all(s.temperature is None for s in samples)
        assert all(s.snowfall is None for s in samples)


class TestAggregatePeriod:
    """Tests for reducing the hours of one period."""

    def test_empty_period_is_none(self):
        assert aggregate_period([], []) is None

    def test_temperature_statistics(self):
        samples = [_sample(temperature=t) for t in (1.0, 2.0, 3.0, 10.0)]

        agg = aggregate_period(samples, [])

        assert agg.temperature_max == 10.0
        assert agg.temperature_min == 1.0
        assert agg.temperature_avg == 4.0
        assert agg.temperature_median == 2.5

    def test_sums_and_means(self):
        samples = [
            _sample(
                precipitation=0.5,
                rain=0.25,
                snowfall=0.1,
                wind_speed=speed,
                humidity=70.0,
                surface_pressure=pressure,
            )
            for speed, pressure in ((10.0, 850.0), (20.0, 860.0))
        ]

        agg = aggregate_period(samples, [])

        assert agg.precipitation_total == 1.0
        assert agg.rain_total == 0.5
        assert agg.snowfall_total == pytest.approx(0.2)
        assert agg.wind_speed == 15.0
        assert agg.relative_humidity == 70.0
        assert agg.surface_pressure == 855.0

    def test_precipitation_keeps_four_decimals(self):
        samples = [_sample(precipitation=0.00012, temperature=-5.123) for _ in range(3)]

        agg = aggregate_period(samples, [])

        assert agg.precipitation_total == 0.0004
        assert agg.temperature_avg == -5.12

    def test_modes_are_integers(self):
        directions = [180.0, 180.0, 270.0, 270.0, 90.0, 90.0]
        codes = [71.0, 71.0, 3.0, 73.0, 73.0, 3.0]
        samples = [
            _sample(wind_direction=d, weather_code=c) for d, c in zip(directions, codes)
        ]

        agg = aggregate_period(samples, [])

        assert agg.wind_direction == 270
        assert agg.weather_code == 73
        assert isinstance(agg.wind_direction, int)
        assert isinstance(agg.weather_code, int)

    def test_freezing_level_is_max(self):
        agg = aggregate_period([_sample()], [1200.0, 1800.0, 1500.0])
        assert agg.freezing_level == 1800.0

    def test_freezing_level_missing(self):
        agg = aggregate_period([_sample()], [])
        assert agg.freezing_level is None

    def test_snow_estimate_and_ratio(self):
        # -10°C at 80% RH sits in the 12:1 band: 0.7 cm provider snow -> 1.2 cm
        samples = [
            _sample(temperature=-10.0, humidity=80.0, snowfall=0.7, precipitation=0.5)
            for _ in range(6)
        ]

        agg = aggregate_period(samples, [])

        assert agg.snowfall_estimate == pytest.approx(7.2)
        assert agg.snow_to_liquid_ratio == 12.0
        assert agg.snow_quality == SnowQuality.DRY_SNOW

    def test_ratio_average_includes_dry_hours(self):
        # One 20:1 snowing hour and five warm 1:1 hours: (20 + 5) / 6
        snowing = [_sample(temperature=-15.0, humidity=80.0, snowfall=1.0)]
        dry = [_sample(temperature=5.0, humidity=80.0, snowfall=0.0) for _ in range(5)]

        agg = aggregate_period(snowing + dry, [])

        assert agg.snow_to_liquid_ratio == 4.17

    def test_ratio_average_over_mixed_bands(self):
        snowing = [
            _sample(temperature=-10.0, humidity=80.0, snowfall=0.7) for _ in range(6)
        ]
        dry = [_sample(temperature=-3.0, humidity=80.0, snowfall=0.0) for _ in range(6)]

        agg = aggregate_period(snowing + dry, [])

        assert agg.snow_to_liquid_ratio == 9.5

    def test_dry_cold_hours_still_have_a_ratio(self):
        # -5°C at 80% RH sits in the 7:1 band
        agg = aggregate_period([_sample(snowfall=0.0) for _ in range(4)], [])

        assert agg.snow_to_liquid_ratio == 7.0
        assert agg.snowfall_estimate == 0.0

    def test_no_estimable_hours_gives_zero_ratio(self):
        agg = aggregate_period([_sample(humidity=None) for _ in range(4)], [])

        assert agg.snow_to_liquid_ratio == 0.0
        assert agg.snowfall_estimate == 0.0

    def test_quality_only_from_precipitating_hours(self):
        cold_wet = [
            _sample(temperature=-15.0, humidity=90.0, snowfall=1.0, precipitation=0.8)
            for _ in range(3)
        ]
        warm_dry = [
            _sample(temperature=5.0, humidity=50.0, snowfall=0.0, precipitation=0.0)
            for _ in range(3)
        ]

        agg = aggregate_period(cold_wet + warm_dry, [])

        assert agg.snow_quality == SnowQuality.POWDER

    def test_quality_is_worst_of_period(self):
        cold = [
            _sample(temperature=-15.0, humidity=90.0, snowfall=1.0, precipitation=0.8)
            for _ in range(3)
        ]
        warm = [_sample(temperature=5.0, humidity=50.0, precipitation=1.0)]

        agg = aggregate_period(cold + warm, [])

        assert agg.snow_quality == SnowQuality.RAIN

    def test_no_precipitation_means_no_quality(self):
        agg = aggregate_period([_sample(precipitation=0.0) for _ in range(3)], [])
        assert agg.snow_quality is None

    def test_missing_values_are_skipped(self):
        samples = [
            _sample(temperature=None, precipitation=None, snowfall=1.0),
            _sample(temperature=-2.0, precipitation=0.3, snowfall=None),
            _sample(temperature=-4.0, precipitation=0.1, wind_direction=None),
        ]

        agg = aggregate_period(samples, [None, 1500.0])

        assert agg.temperature_max == -2.0
        assert agg.temperature_min == -4.0
        assert agg.precipitation_total == 0.4
        assert agg.snowfall_total == 1.0
        assert agg.wind_direction == 270
        assert agg.freezing_level == 1500.0
        # Only the third hour has temperature, humidity and snowfall
        assert agg.snowfall_estimate == 0.0

    def test_all_temperatures_missing(self):
        agg = aggregate_period([_sample(temperature=None) for _ in range(2)], [])

        assert agg.temperature_max is None
        assert agg.temperature_avg is None
        assert agg.temperature_median is None
        assert agg.precipitation_total == 0.0


class TestAggregateForecast:
    """Tests for bucketing a full series into dated periods."""

    def test_missing_response(self):
        assert aggregate_forecast(None) is None

    def test_missing_hourly(self):
        response = PointResponse(latitude=50.0, longitude=-120.0, hourly=None)
        assert aggregate_forecast(response) is None

    def test_empty_series(self, make_main_response):
        assert aggregate_forecast(make_main_response(hours=0)) is None

    def test_single_utc_day(self, make_main_response):
        response = make_main_response(
            hours=24, temperature=-3.0, humidity=80.0, snowfall=1.0, precipitation=0.7
        )

        forecast = aggregate_forecast(response)

        assert list(forecast) == ["2026-01-15"]
        day = forecast["2026-01-15"]
        assert day.am.snowfall_total == 12.0
        assert day.pm.snowfall_total == 6.0
        assert day.night.snowfall_total == 6.0
        # -3°C at 80% RH sits in the 7:1 band: 1 cm provider snow -> 1 cm
        assert day.am.snowfall_estimate == pytest.approx(12.0)
        assert day.am.snow_to_liquid_ratio == 7.0
        assert day.am.snow_quality == SnowQuality.DRY_SNOW

    def test_period_boundaries(self, make_main_response):
        response = make_main_response(hours=24, temperature=[float(h) for h in range(24)])

        day = aggregate_forecast(response)["2026-01-15"]

        assert (day.am.temperature_min, day.am.temperature_max) == (0.0, 11.0)
        assert (day.pm.temperature_min, day.pm.temperature_max) == (12.0, 17.0)
        assert (day.night.temperature_min, day.night.temperature_max) == (18.0, 23.0)

    def test_negative_utc_offset_shifts_dates(self, make_main_response):
        response = make_main_response(
            hours=24,
            utc_offset=-8 * HOUR,
            temperature=[float(h) for h in range(24)],
            snowfall=1.0,
        )

        forecast = aggregate_forecast(response)

        assert sorted(forecast) == ["2026-01-14", "2026-01-15"]
        first, second = forecast["2026-01-14"], forecast["2026-01-15"]

        # Local day starts at 16:00 on the 14th
        assert first.am is None
        assert first.pm.snowfall_total == 2.0
        assert first.pm.temperature_max == 1.0
        assert first.night.snowfall_total == 6.0
        assert first.night.temperature_avg == 4.5

        assert second.am.snowfall_total == 12.0
        assert second.am.temperature_min == 8.0
        assert second.pm.snowfall_total == 4.0
        assert second.night is None

    def test_three_hour_interval(self, make_main_response):
        response = make_main_response(hours=8, interval=3 * HOUR, snowfall=1.0)

        day = aggregate_forecast(response)["2026-01-15"]

        assert day.am.snowfall_total == 4.0
        assert day.pm.snowfall_total == 2.0
        assert day.night.snowfall_total == 2.0

    def test_freezing_levels_bucketed_by_period(
        self, make_main_response, make_freezing_response
    ):
        main = make_main_response(hours=24)
        freezing = make_freezing_response([100.0 * h for h in range(24)])

        day = aggregate_forecast(main, freezing)["2026-01-15"]

        assert day.am.freezing_level == 1100.0
        assert day.pm.freezing_level == 1700.0
        assert day.night.freezing_level == 2300.0

    def test_freezing_dates_without_main_hours_are_dropped(
        self, make_main_response, make_freezing_response
    ):
        main = make_main_response(hours=24)
        freezing = make_freezing_response([1500.0] * 48)

        forecast = aggregate_forecast(main, freezing)

        assert list(forecast) == ["2026-01-15"]
        assert forecast["2026-01-15"].night.freezing_level == 1500.0

    def test_freezing_uses_its_own_offset(
        self, make_main_response, make_freezing_response
    ):
        main = make_main_response(hours=24)
        # Same instants, but with a +1h offset the first value lands at 01:00
        # and the value for 23:00 UTC moves to the next day
        freezing = make_freezing_response(
            [float(h) for h in range(24)], utc_offset=HOUR
        )

        day = aggregate_forecast(main, freezing)["2026-01-15"]

        assert day.am.freezing_level == 10.0
        assert day.night.freezing_level == 22.0

    def test_missing_freezing_response(self, make_main_response):
        day = aggregate_forecast(make_main_response(hours=24), None)["2026-01-15"]
        assert day.am.freezing_level is None
