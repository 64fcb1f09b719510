"""
Tests for the sensor reading collector against fake sensor APIs
"""
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from agro_monitor.database import get_utc_datetime
from agro_monitor.models import Company, Notification, Profile, Zone
from agro_monitor.services.sensor_collector import ALERT_TITLE

OLD_TIMESTAMP = "2020-01-01T00:00:00+00:00"


def _notifications(db):
    return db.query(Notification).order_by(Notification.id).all()


def test_sensors_without_api_url_are_skipped(db_session, remote_api, make_sensor, run_collector):
    make_sensor()
    make_sensor(last_reading={"apiUrl": None, "value": 3})
    make_sensor(last_reading={"apiUrl": ""})

    report = run_collector()

    assert report.success is True
    assert report.results == []
    assert remote_api.requests == []


def test_value_field_is_persisted_with_fresh_timestamp(db_session, remote_api, make_sensor, run_collector):
    remote_api.add("http://sensors.example/moisture", json={"value": 42})
    sensor = make_sensor(last_reading={
        "apiUrl": "http://sensors.example/moisture",
        "apiMethod": "GET",
        "value": 1,
        "timestamp": OLD_TIMESTAMP,
    })
    started = get_utc_datetime()

    report = run_collector()

    assert len(report.results) == 1
    assert report.results[0].success is True
    assert report.results[0].value == 42

    db_session.refresh(sensor)
    assert sensor.last_reading["value"] == 42
    assert sensor.last_reading["apiUrl"] == "http://sensors.example/moisture"
    assert sensor.last_reading["apiMethod"] == "GET"
    stored_at = datetime.fromisoformat(sensor.last_reading["timestamp"])
    assert stored_at > datetime.fromisoformat(OLD_TIMESTAMP)
    assert stored_at >= started


def test_bare_number_response(db_session, remote_api, make_sensor, run_collector):
    remote_api.add("http://sensors.example/temp", json=17.5)
    sensor = make_sensor("http://sensors.example/temp")

    report = run_collector()

    assert report.results[0].value == 17.5
    db_session.refresh(sensor)
    assert sensor.last_reading["value"] == 17.5


def test_request_uses_configured_method_and_bearer_key(db_session, remote_api, make_sensor, run_collector):
    remote_api.add("http://sensors.example/wind", json={"reading": 4})
    make_sensor(last_reading={
        "apiUrl": "http://sensors.example/wind",
        "apiKey": "secret-token",
        "apiMethod": "POST",
    })

    run_collector()

    request = remote_api.requests[0]
    assert request.method == "POST"
    assert request.headers["Authorization"] == "Bearer secret-token"
    assert request.headers["Content-Type"] == "application/json"


def test_method_defaults_to_get_without_authorization(db_session, remote_api, make_sensor, run_collector):
    remote_api.add("http://sensors.example/a", json=1)
    make_sensor("http://sensors.example/a")

    run_collector()

    request = remote_api.requests[0]
    assert request.method == "GET"
    assert "Authorization" not in request.headers


def test_unrecognized_body_stores_null_and_skips_alerts(db_session, remote_api, users, make_sensor, run_collector):
    remote_api.add("http://sensors.example/odd", json={"temperature": 3})
    sensor = make_sensor("http://sensors.example/odd", alert_enabled=True, threshold_min=10)

    report = run_collector()

    assert report.results[0].success is True
    assert report.results[0].value is None
    db_session.refresh(sensor)
    assert sensor.last_reading["value"] is None
    assert _notifications(db_session) == []


def test_below_min_notifies_every_company_user(db_session, remote_api, users, make_sensor, run_collector):
    other_company = Company(name="Neighbour")
    db_session.add(other_company)
    db_session.commit()
    db_session.add(Profile(company_id=other_company.id, first_name="Outsider"))
    db_session.commit()

    remote_api.add("http://sensors.example/moisture", json={"value": 5})
    make_sensor("http://sensors.example/moisture", name="Soil", alert_enabled=True, threshold_min=10)

    run_collector()

    notifications = _notifications(db_session)
    assert sorted(n.user_id for n in notifications) == sorted(u.id for u in users)
    for notification in notifications:
        assert notification.type == "warning"
        assert notification.title == ALERT_TITLE
        assert notification.message == 'Показание датчика "Soil" ниже порогового значения: 5 < 10 (на 5)'
        assert notification.is_read is False


def test_above_max_notifies(db_session, remote_api, users, make_sensor, run_collector):
    remote_api.add("http://sensors.example/t", json={"value": 31})
    make_sensor("http://sensors.example/t", alert_enabled=True, threshold_max=25)

    run_collector()

    notifications = _notifications(db_session)
    assert len(notifications) == len(users)
    assert notifications[0].message.endswith("31 > 25 (на 6)")


def test_fractional_reading_is_rounded_in_alert(db_session, remote_api, users, make_sensor, run_collector):
    remote_api.add("http://sensors.example/t", json={"reading": 24.1})
    make_sensor("http://sensors.example/t", alert_enabled=True, threshold_min=25)

    run_collector()

    notifications = _notifications(db_session)
    assert len(notifications) == len(users)
    assert notifications[0].message.endswith("24.1 < 25 (на 0.9)")


def test_value_on_max_boundary_does_not_notify(db_session, remote_api, users, make_sensor, run_collector):
    remote_api.add("http://sensors.example/t", json={"value": 100})
    make_sensor("http://sensors.example/t", alert_enabled=True, threshold_max=100)

    run_collector()

    assert _notifications(db_session) == []


def test_alerts_disabled_does_not_notify(db_session, remote_api, users, make_sensor, run_collector):
    remote_api.add("http://sensors.example/t", json={"value": 500})
    make_sensor("http://sensors.example/t", alert_enabled=False, threshold_max=100)

    run_collector()

    assert _notifications(db_session) == []


def test_failing_sensor_does_not_block_the_next(db_session, remote_api, make_sensor, run_collector):
    broken = make_sensor(last_reading={
        "apiUrl": "http://offline.example/a",
        "value": 11,
        "timestamp": OLD_TIMESTAMP,
    })
    remote_api.add("http://sensors.example/b", json={"value": 12})
    healthy = make_sensor("http://sensors.example/b")

    report = run_collector()

    by_id = {r.sensor_id: r for r in report.results}
    assert report.success is True
    assert by_id[broken.id].success is False
    assert "offline.example" in by_id[broken.id].error
    assert by_id[healthy.id].success is True
    assert by_id[healthy.id].value == 12

    db_session.refresh(broken)
    db_session.refresh(healthy)
    assert broken.last_reading["value"] == 11
    assert broken.last_reading["timestamp"] == OLD_TIMESTAMP
    assert healthy.last_reading["value"] == 12


def test_error_status_and_non_json_body_are_failures(db_session, remote_api, make_sensor, run_collector):
    remote_api.add("http://sensors.example/down", status_code=503, json={"value": 1})
    remote_api.add("http://sensors.example/html", content=b"<html>maintenance</html>")
    down = make_sensor(last_reading={"apiUrl": "http://sensors.example/down", "value": 7})
    html = make_sensor(last_reading={"apiUrl": "http://sensors.example/html", "value": 8})

    report = run_collector()

    assert [r.success for r in report.results] == [False, False]
    db_session.refresh(down)
    db_session.refresh(html)
    assert down.last_reading["value"] == 7
    assert html.last_reading["value"] == 8


def test_repeated_runs_create_duplicate_notifications(db_session, remote_api, users, make_sensor, run_collector):
    remote_api.add("http://sensors.example/moisture", json={"value": 5})
    make_sensor("http://sensors.example/moisture", alert_enabled=True, threshold_min=10)

    run_collector()
    run_collector()

    assert len(_notifications(db_session)) == 2 * len(users)


def test_sensor_in_zone_of_another_company_notifies_that_company(db_session, remote_api, users, make_sensor, run_collector):
    other_company = Company(name="Other farm")
    db_session.add(other_company)
    db_session.commit()
    other_zone = Zone(company_id=other_company.id, name="Orchard")
    outsider = Profile(company_id=other_company.id, first_name="Owner")
    db_session.add_all([other_zone, outsider])
    db_session.commit()

    remote_api.add("http://sensors.example/orchard", json=-3)
    make_sensor("http://sensors.example/orchard", zone_id=other_zone.id, alert_enabled=True, threshold_min=0)

    run_collector()

    notifications = _notifications(db_session)
    assert [n.user_id for n in notifications] == [outsider.id]


def test_storage_failure_keeps_old_value_and_still_alerts(db_session, remote_api, users, make_sensor, run_collector, monkeypatch):
    remote_api.add("http://sensors.example/moisture", json={"value": 5})
    sensor = make_sensor(
        last_reading={"apiUrl": "http://sensors.example/moisture", "value": 30},
        alert_enabled=True,
        threshold_min=10,
    )

    real_commit = db_session.commit
    calls = []

    def flaky_commit():
        calls.append(1)
        if len(calls) == 1:
            raise SQLAlchemyError("disk I/O error")
        return real_commit()

    monkeypatch.setattr(db_session, "commit", flaky_commit)

    report = run_collector()

    assert report.results[0].success is True
    db_session.refresh(sensor)
    assert sensor.last_reading["value"] == 30
    assert len(_notifications(db_session)) == len(users)


def test_notification_failure_is_recorded_per_sensor(db_session, remote_api, users, make_sensor, run_collector, monkeypatch):
    remote_api.add("http://sensors.example/a", json={"value": 5})
    remote_api.add("http://sensors.example/b", json={"value": 50})
    alerting = make_sensor("http://sensors.example/a", alert_enabled=True, threshold_min=10)
    quiet = make_sensor("http://sensors.example/b")

    real_commit = db_session.commit
    calls = []

    def flaky_commit():
        calls.append(1)
        # second commit is the notification insert of the first sensor
        if len(calls) == 2:
            raise SQLAlchemyError("notifications table locked")
        return real_commit()

    monkeypatch.setattr(db_session, "commit", flaky_commit)

    report = run_collector()

    by_id = {r.sensor_id: r for r in report.results}
    assert by_id[alerting.id].success is False
    assert "notifications table locked" in by_id[alerting.id].error
    assert by_id[quiet.id].success is True
    assert _notifications(db_session) == []


def test_non_finite_constants_are_malformed_bodies(db_session, remote_api, users, make_sensor, run_collector):
    remote_api.add("http://sensors.example/inf", content=b'{"value": Infinity}')
    remote_api.add("http://sensors.example/nan", content=b'{"value": NaN}')
    infinite = make_sensor(
        last_reading={"apiUrl": "http://sensors.example/inf", "value": 20, "timestamp": OLD_TIMESTAMP},
        alert_enabled=True,
        threshold_max=100,
    )
    not_a_number = make_sensor(
        last_reading={"apiUrl": "http://sensors.example/nan", "value": 21, "timestamp": OLD_TIMESTAMP},
    )

    report = run_collector()

    assert [r.success for r in report.results] == [False, False]
    assert "Infinity" in report.results[0].error
    assert "NaN" in report.results[1].error

    db_session.refresh(infinite)
    db_session.refresh(not_a_number)
    assert infinite.last_reading["value"] == 20
    assert infinite.last_reading["timestamp"] == OLD_TIMESTAMP
    assert not_a_number.last_reading["value"] == 21
    assert not_a_number.last_reading["timestamp"] == OLD_TIMESTAMP
    assert _notifications(db_session) == []
