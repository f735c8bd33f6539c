"""
Attendance (clock-in / clock-out) tests.
"""

from datetime import timedelta

from bakery.extensions import db
from bakery.models import Attendance
from bakery.services import timekeeping_service
from bakery.time_utils import utcnow


class TestClockInOut:

    def test_clock_in_opens_entry(self, driver):
        result = timekeeping_service.clock_in(driver.staff_id)

        assert result.success, result.error
        entry = db.session.get(Attendance, result["attendanceId"])
        assert entry.is_open
        assert entry.date == utcnow().strftime("%Y-%m-%d")
        assert timekeeping_service.get_attendance_status(driver.staff_id) == {"attendanceId": entry.id}

    def test_cannot_clock_in_twice(self, driver):
        timekeeping_service.clock_in(driver.staff_id)

        again = timekeeping_service.clock_in(driver.staff_id)

        assert again.error == "You are already clocked in."
        assert again.error_code == "invalid_state"
        assert db.session.query(Attendance).count() == 1

    def test_clock_out_closes_entry(self, driver):
        attendance_id = timekeeping_service.clock_in(driver.staff_id)["attendanceId"]

        result = timekeeping_service.clock_out(attendance_id, driver.staff_id)

        assert result.success, result.error
        assert result["attendance"]["clock_out_time"].endswith("Z")
        assert timekeeping_service.get_attendance_status(driver.staff_id) is None
        assert timekeeping_service.clock_in(driver.staff_id).success

    def test_clock_out_once(self, driver):
        attendance_id = timekeeping_service.clock_in(driver.staff_id)["attendanceId"]
        timekeeping_service.clock_out(attendance_id, driver.staff_id)

        again = timekeeping_service.clock_out(attendance_id, driver.staff_id)

        assert again.error == "You have already clocked out."

    def test_cannot_clock_out_someone_else(self, driver, showroom):
        attendance_id = timekeeping_service.clock_in(driver.staff_id)["attendanceId"]

        result = timekeeping_service.clock_out(attendance_id, showroom.staff_id)

        assert result.error_code == "not_found"
        assert db.session.get(Attendance, attendance_id).is_open

    def test_unknown_staff(self, db_session):
        assert timekeeping_service.clock_in("000000").error_code == "not_found"

    def test_yesterdays_open_entry_is_not_todays_status(self, driver):
        yesterday = utcnow() - timedelta(days=1)
        db.session.add(Attendance(staff_id=driver.staff_id, date=yesterday.strftime("%Y-%m-%d"), clock_in_time=yesterday))
        db.session.commit()

        assert timekeeping_service.get_attendance_status(driver.staff_id) is None


class TestAttendanceHistory:

    def test_history_carries_staff_names(self, driver, showroom):
        timekeeping_service.clock_in(driver.staff_id)
        timekeeping_service.clock_in(showroom.staff_id)

        names = {e["staff_name"] for e in timekeeping_service.get_attendance()}
        mine = timekeeping_service.get_attendance(staff_id=driver.staff_id)

        assert names == {"Van Driver", "Showroom"}
        assert [e["staff_id"] for e in mine] == [driver.staff_id]

    def test_history_date_range(self, driver):
        timekeeping_service.clock_in(driver.staff_id)

        assert timekeeping_service.get_attendance(end=utcnow() - timedelta(days=1)) == []
        assert len(timekeeping_service.get_attendance(start=utcnow() - timedelta(days=1))) == 1
