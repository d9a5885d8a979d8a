import pytest

from weather_ranker.comfort import compute_comfort_score, round_half_up
from weather_ranker.errors import ProviderError

from conftest import make_reading


def test_ideal_conditions_score_100():
    result = compute_comfort_score(make_reading(temp_k=295.15, humidity=50, wind=0, clouds=20))
    c = result.components
    assert (c.tempScore, c.humidityScore, c.windScore, c.cloudScore) == (100, 100, 100, 100)
    assert c.tempC == 22.0
    assert result.score == 100


def test_freezing_temperature():
    result = compute_comfort_score(make_reading(temp_k=273.15, humidity=50, wind=0, clouds=20))
    assert result.components.tempC == 0.0
    assert result.components.tempScore == 12
    # 0.4*12 + 30 + 20 + 10 = 64.8
    assert result.score == 65


def test_calm_wind_is_penalty_free():
    assert compute_comfort_score(make_reading(wind=3)).components.windScore == 100
    assert compute_comfort_score(make_reading(wind=4)).components.windScore == 80
    assert compute_comfort_score(make_reading(wind=10)).components.windScore == 0


def test_humidity_and_clouds_penalties():
    c = compute_comfort_score(make_reading(humidity=90, clouds=100)).components
    assert c.humidityScore == 40
    assert c.cloudScore == 36


def test_missing_fields_count_as_zero():
    result = compute_comfort_score({})
    c = result.components
    assert c.tempC == pytest.approx(-273.15, abs=0.06)
    assert c.tempScore == 0
    assert c.humidity == 0 and c.humidityScore == 25
    assert c.wind == 0 and c.windScore == 100
    assert c.clouds == 0 and c.cloudScore == 84
    # 0.3*25 + 0.2*100 + 0.1*84 = 35.9
    assert result.score == 36


@pytest.mark.parametrize("temp_k,humidity,wind,clouds", [
    (200.0, 0, 0, 0),
    (350.0, 100, 40, 100),
    (290.0, 45, 2.5, 10),
    (310.5, 5, 7.7, 55),
])
def test_scores_stay_in_range(temp_k, humidity, wind, clouds):
    result = compute_comfort_score(make_reading(temp_k=temp_k, humidity=humidity, wind=wind, clouds=clouds))
    assert 0 <= result.score <= 100
    c = result.components
    for sub in (c.tempScore, c.humidityScore, c.windScore, c.cloudScore):
        assert 0 <= sub <= 100


def test_round_half_up():
    assert round_half_up(64.5) == 65
    assert round_half_up(2.5) == 3
    assert round_half_up(21.25, 1) == 21.3


@pytest.mark.parametrize("reading", [
    make_reading(temp_k=float("nan")),
    make_reading(humidity=float("inf")),
    make_reading(wind="calm"),
    {"main": "295.15"},
    {"clouds": [20]},
])
def test_invalid_values_raise_provider_error(reading):
    with pytest.raises(ProviderError, match="Unexpected OpenWeather payload"):
        compute_comfort_score(reading)


def test_numeric_strings_are_accepted():
    assert compute_comfort_score(make_reading(temp_k="295.15", humidity="50")).score == 100
