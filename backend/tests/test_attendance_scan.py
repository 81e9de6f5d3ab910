import json
from datetime import date

from daycare.models.schedule import ClassSchedule
from daycare.utils.attendance_time import WEEKDAYS, weekday_name

from tests.conftest import auth_headers, schedule_qr


SCAN_URL = "/api/attendance/scan"


def _scan(client, headers, **body):
    body.setdefault("current_day", "Monday")
    body.setdefault("attendance_date", "2024-01-01")
    return client.post(SCAN_URL, json=body, headers=headers)


def test_parent_qr_scan_on_time(client, seed_users, seed_schedule):
    headers = auth_headers(client, "parent001")
    resp = _scan(client, headers, qr_data=schedule_qr(seed_schedule.schedule_id), current_time="8:00 AM")
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["attendance_type"] == "timeIn"
    assert body["classification_message"] == "Time In: 8:00 AM - 8:30 AM"
    assert body["status_result"] == {"status": "present", "minutes_late": 0, "is_on_time": True, "error": None}
    assert body["status_message"] == "Checked in on time"
    assert body["message"] == "PRESENT: Checked in on time for Minji Park"

    record = body["attendance"]
    assert record["student_id"] == seed_users["parent"].user_id
    assert record["schedule_id"] == seed_schedule.schedule_id
    assert record["attendance_date"] == "2024-01-01"
    assert record["time_in"] == "8:00 AM"
    assert record["source"] == "qr"


def test_scan_within_grace_period_is_present(client, seed_users, seed_schedule):
    headers = auth_headers(client, "parent001")
    resp = _scan(client, headers, qr_data=schedule_qr(seed_schedule.schedule_id), current_time="08:10")
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["status_result"]["status"] == "present"
    assert body["status_result"]["minutes_late"] == 10
    assert body["status_result"]["is_on_time"] is False
    assert body["status_message"] == "Checked in 10 minutes late (within grace period)"
    assert body["attendance"]["time_in"] == "8:10 AM"


def test_scan_after_grace_period_is_late(client, seed_users, seed_schedule):
    headers = auth_headers(client, "parent001")
    resp = _scan(client, headers, qr_data=schedule_qr(seed_schedule.schedule_id), current_time="8:20 AM")
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["attendance"]["status"] == "late"
    assert body["attendance"]["minutes_late"] == 20
    assert body["message"] == "LATE: Checked in 20 minutes late for Minji Park"


def test_scan_outside_windows_is_rejected(client, seed_users, seed_schedule):
    headers = auth_headers(client, "parent001")
    resp = _scan(client, headers, qr_data=schedule_qr(seed_schedule.schedule_id), current_time="10:00 AM")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Break time. Time Out starts at 3:00 PM"

    resp = _scan(client, headers, qr_data=schedule_qr(seed_schedule.schedule_id), current_time="6:30 AM")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Too early. Time In starts at 8:00 AM (in 1h 30m)"


def test_scan_on_wrong_day_reports_schedule_day(client, seed_users, seed_schedule):
    headers = auth_headers(client, "parent001")
    resp = _scan(
        client,
        headers,
        qr_data=schedule_qr(seed_schedule.schedule_id),
        current_day="Tuesday",
        current_time="8:10 AM",
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "No schedule for Tuesday. Schedule is for Monday."


def test_explicit_attendance_type_overrides_classification(client, seed_users, seed_schedule):
    headers = auth_headers(client, "parent001")
    resp = _scan(
        client,
        headers,
        qr_data=schedule_qr(seed_schedule.schedule_id, "timeIn"),
        current_time="10:00 AM",
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["attendance_type"] == "timeIn"
    assert body["classification_message"] == "Break time. Time Out starts at 3:00 PM"
    assert body["attendance"]["status"] == "late"
    assert body["attendance"]["minutes_late"] == 120


def test_invalid_attendance_type_is_rejected(client, seed_users, seed_schedule):
    headers = auth_headers(client, "parent001")
    resp = _scan(
        client,
        headers,
        qr_data=schedule_qr(seed_schedule.schedule_id),
        attendance_type="lunch",
        current_time="8:10 AM",
    )
    assert resp.status_code == 400


def test_time_out_keeps_time_in_status(client, seed_users, seed_schedule):
    headers = auth_headers(client, "parent001")
    qr = schedule_qr(seed_schedule.schedule_id)
    first = _scan(client, headers, qr_data=qr, current_time="8:20 AM")
    assert first.status_code == 200, first.text

    resp = _scan(client, headers, qr_data=qr, current_time="3:10 PM")
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["attendance_type"] == "timeOut"
    assert body["status_result"] is None
    assert body["status_message"] == "Checked out 10 minutes late (within grace period)"
    assert body["message"] == "TIMED OUT: Minji Park has been timed out at 3:10 PM"

    record = body["attendance"]
    assert record["attendance_id"] == first.json()["attendance"]["attendance_id"]
    assert record["status"] == "late"
    assert record["minutes_late"] == 20
    assert record["time_in"] == "8:20 AM"
    assert record["time_out"] == "3:10 PM"
    assert "Checked in 20 minutes late" in record["notes"]
    assert "Checked out 10 minutes late" in record["notes"]


def test_time_out_without_time_in_creates_present_record(client, seed_users, seed_schedule):
    headers = auth_headers(client, "parent001")
    resp = _scan(client, headers, qr_data=schedule_qr(seed_schedule.schedule_id), current_time="3:30 PM")
    assert resp.status_code == 200, resp.text
    record = resp.json()["attendance"]
    assert record["status"] == "present"
    assert record["time_in"] is None
    assert record["time_out"] == "3:30 PM"


def test_repeated_time_in_updates_single_record(client, seed_users, seed_schedule):
    headers = auth_headers(client, "parent001")
    qr = schedule_qr(seed_schedule.schedule_id)
    assert _scan(client, headers, qr_data=qr, current_time="8:05 AM").status_code == 200
    assert _scan(client, headers, qr_data=qr, current_time="8:25 AM").status_code == 200

    staff = auth_headers(client, "teacher001")
    records = client.get(
        "/api/attendance",
        params={"schedule_id": seed_schedule.schedule_id, "attendance_date": "2024-01-01"},
        headers=staff,
    ).json()
    assert len(records) == 1
    assert records[0]["time_in"] == "8:25 AM"
    assert records[0]["status"] == "late"


def test_teacher_rfid_scan_picks_active_schedule(client, seed_users, seed_schedule):
    headers = auth_headers(client, "teacher001")
    resp = _scan(client, headers, rfid_tag="RFID-0001", current_time="8:00 AM")
    assert resp.status_code == 200, resp.text
    record = resp.json()["attendance"]
    assert record["student_id"] == seed_users["parent"].user_id
    assert record["schedule_id"] == seed_schedule.schedule_id
    assert record["source"] == "rfid"
    assert record["recorded_by"] == seed_users["teacher"].user_id


def test_unknown_rfid_tag_is_not_found(client, seed_users, seed_schedule):
    headers = auth_headers(client, "teacher001")
    resp = _scan(client, headers, rfid_tag="RFID-9999", current_time="8:00 AM")
    assert resp.status_code == 404


def test_student_qr_scan_by_teacher(client, seed_users, seed_schedule):
    headers = auth_headers(client, "teacher001")
    qr = json.dumps({"type": "student", "studentId": seed_users["parent"].user_id})
    resp = _scan(client, headers, qr_data=qr, current_time="3:20 PM")
    assert resp.status_code == 200, resp.text
    assert resp.json()["attendance_type"] == "timeOut"


def test_parent_self_scan_without_code(client, seed_users, seed_schedule):
    headers = auth_headers(client, "parent001")
    resp = _scan(client, headers, current_time="8:05 AM")
    assert resp.status_code == 200, resp.text
    assert resp.json()["attendance"]["source"] == "manual"


def test_parent_cannot_scan_for_other_student(client, seed_users, seed_schedule):
    headers = auth_headers(client, "parent001")
    resp = _scan(
        client,
        headers,
        student_id=seed_users["other_parent"].user_id,
        qr_data=schedule_qr(seed_schedule.schedule_id),
        current_time="8:05 AM",
    )
    assert resp.status_code == 403


def test_scan_for_unassigned_student_is_not_found(client, seed_users, seed_schedule):
    headers = auth_headers(client, "teacher001")
    resp = _scan(
        client,
        headers,
        student_id=seed_users["other_parent"].user_id,
        qr_data=schedule_qr(seed_schedule.schedule_id),
        current_time="8:05 AM",
    )
    assert resp.status_code == 404


def test_scan_without_schedule_for_day_is_not_found(client, seed_users, seed_schedule):
    headers = auth_headers(client, "parent001")
    resp = _scan(client, headers, current_day="Saturday", current_time="8:05 AM")
    assert resp.status_code == 404


def test_staff_scan_without_student_is_rejected(client, seed_users, seed_schedule):
    headers = auth_headers(client, "teacher001")
    resp = _scan(client, headers, qr_data=schedule_qr(seed_schedule.schedule_id), current_time="8:05 AM")
    assert resp.status_code == 400


def test_invalid_scan_inputs(client, seed_users, seed_schedule):
    headers = auth_headers(client, "parent001")
    assert _scan(client, headers, qr_data="not-json", current_time="8:05 AM").status_code == 400
    assert _scan(client, headers, qr_data=json.dumps({"type": "coupon"}), current_time="8:05 AM").status_code == 400
    assert _scan(
        client, headers, qr_data=json.dumps({"type": "schedule", "id": "abc"}), current_time="8:05 AM"
    ).status_code == 400
    assert _scan(
        client, headers, qr_data=schedule_qr(seed_schedule.schedule_id), current_time="25:99"
    ).status_code == 400
    assert _scan(
        client, headers, qr_data=schedule_qr(seed_schedule.schedule_id), current_day="Someday", current_time="8:05 AM"
    ).status_code == 400


def test_scan_notifies_student_account(client, seed_users, seed_schedule):
    headers = auth_headers(client, "teacher001")
    resp = _scan(client, headers, rfid_tag="RFID-0001", current_time="8:00 AM")
    assert resp.status_code == 200, resp.text

    parent_headers = auth_headers(client, "parent001")
    notis = client.get("/api/notifications", headers=parent_headers).json()
    assert len(notis) == 1
    assert notis[0]["noti_type"] == "attendance"
    assert notis[0]["title"] == "등원 알림"
    assert notis[0]["message"] == "Minji Park: Checked in on time"
    assert notis[0]["attendance_id"] == resp.json()["attendance"]["attendance_id"]
    assert notis[0]["is_read"] is False


def test_scan_skips_notification_when_disabled(client, seed_users, seed_schedule, monkeypatch):
    from daycare.config import settings

    monkeypatch.setattr(settings, "ATTENDANCE_NOTIFY_ENABLED", False)
    headers = auth_headers(client, "parent001")
    resp = _scan(client, headers, qr_data=schedule_qr(seed_schedule.schedule_id), current_time="8:00 AM")
    assert resp.status_code == 200, resp.text
    assert client.get("/api/notifications", headers=headers).json() == []


def _today_schedule_qr(db, section, seed_schedule):
    today_name = weekday_name(date.today())
    if today_name == seed_schedule.day:
        return schedule_qr(seed_schedule.schedule_id)
    schedule = ClassSchedule(
        section_id=section.section_id,
        day=today_name,
        time_in_start="8:00 AM",
        time_in_end="8:30 AM",
        time_out_start="3:00 PM",
        time_out_end="4:00 PM",
        grace_period_minutes=15,
    )
    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    return schedule_qr(schedule.schedule_id)


def test_client_day_must_match_server_date_without_attendance_date(client, db, seed_users, seed_section, seed_schedule):
    qr = _today_schedule_qr(db, seed_section, seed_schedule)
    headers = auth_headers(client, "parent001")
    today = date.today()
    other_day = WEEKDAYS[(WEEKDAYS.index(weekday_name(today)) + 1) % 7]

    resp = client.post(
        SCAN_URL,
        json={"qr_data": qr, "current_day": other_day, "current_time": "8:00 AM"},
        headers=headers,
    )
    assert resp.status_code == 400

    resp = client.post(
        SCAN_URL,
        json={"qr_data": qr, "current_day": weekday_name(today), "current_time": "8:00 AM"},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["attendance"]["attendance_date"] == today.isoformat()
