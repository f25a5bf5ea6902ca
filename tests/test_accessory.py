import pytest

from accessories.sht3x import SHT3xAccessory
from core.calibration import calculate_dewpoint
from core.reading_cache import NoDataAvailable
from core.registry import get_accessory_class
from sensors.base import SensorReadError


def extract_temperature(reading):
    return reading.temperature


def extract_humidity(reading):
    return reading.humidity


@pytest.fixture
def accessory(make_config, bus, sensor, history, clock):
    config = make_config(
        temperature_calibration=1.0, humidity_calibration=-2.0, dewpoint_enabled=True
    )
    acc = SHT3xAccessory(config, bus, history, sensor=sensor, clock=clock)
    yield acc
    acc.close()


def test_registered_under_type_name() -> None:
    assert get_accessory_class("SHT3x") is SHT3xAccessory


def test_get_current_fails_before_first_sample(accessory) -> None:
    for extractor in (extract_temperature, extract_humidity, lambda r: r):
        with pytest.raises(NoDataAvailable):
            accessory.get_current(extractor)


def test_get_current_returns_calibrated_cached_values(accessory, sensor) -> None:
    accessory.source.sample()
    reads = sensor.reads

    assert accessory.get_current(extract_temperature) == 21.0
    assert accessory.get_current(extract_humidity) == 48.0
    assert sensor.reads == reads


def test_failed_sample_keeps_earlier_values(accessory, sensor) -> None:
    accessory.source.sample()
    sensor.push(OSError("remote I/O error"))
    accessory.source.sample()

    assert accessory.get_current(extract_temperature) == 21.0
    assert accessory.get_current(extract_humidity) == 48.0


def test_get_dew_point_reads_sensor_every_call(accessory, sensor) -> None:
    accessory.source.sample()
    reads = sensor.reads

    first = accessory.get_dew_point(lambda d: d)
    second = accessory.get_dew_point(lambda d: d)

    assert sensor.reads == reads + 2
    assert first == second == calculate_dewpoint(21.0, 48.0)


def test_get_dew_point_does_not_need_cache(accessory, sensor) -> None:
    sensor.push({"temperature": 10.0, "humidity": 80.0})

    value = accessory.get_dew_point(lambda d: round(d, 3))

    assert value == round(calculate_dewpoint(11.0, 78.0), 3)
    assert accessory.cache.has_data is False


def test_get_dew_point_propagates_read_failure(accessory, sensor) -> None:
    sensor.push(OSError("no ack"))

    with pytest.raises(SensorReadError, match="no ack"):
        accessory.get_dew_point(lambda d: d)


def test_dewpoint_getter_only_when_enabled(make_config, bus, sensor) -> None:
    enabled = SHT3xAccessory(make_config(dewpoint_enabled=True), bus, sensor=sensor)
    disabled = SHT3xAccessory(make_config(dewpoint_enabled=False), bus, sensor=sensor)

    assert sorted(enabled.getters) == ["dewpoint", "humidity", "temperature"]
    assert sorted(disabled.getters) == ["humidity", "temperature"]
    with pytest.raises(KeyError):
        disabled.get("dewpoint")


def test_get_services_describes_accessory(accessory) -> None:
    services = accessory.get_services()
    by_subtype = {s.get("subtype"): s for s in services}

    info = services[0]
    assert info["type"] == "AccessoryInformation"
    assert info["characteristics"]["Manufacturer"] == "Sensirion"
    assert info["characteristics"]["Model"] == "SHT3x"
    assert info["characteristics"]["SerialNumber"].endswith("-office")

    temperature = by_subtype["temperatureService"]
    assert temperature["characteristics"]["CurrentTemperature"]["props"] == {
        "minValue": -40, "maxValue": 125,
    }
    humidity = by_subtype["humidityService"]
    assert humidity["primary"] is True
    assert humidity["linked"] == ["temperatureService"]
    assert by_subtype["dewPointService"]["name"] == "Dew Point"
    assert by_subtype["weather"]["type"] == "History"


def test_get_services_without_dewpoint(make_config, bus, sensor) -> None:
    acc = SHT3xAccessory(make_config(), bus, sensor=sensor)

    subtypes = [s.get("subtype") for s in acc.get_services()]

    assert "dewPointService" not in subtypes
    assert "weather" not in subtypes
