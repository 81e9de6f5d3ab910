"""Seed the database with demo data."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from daycare.database import SessionLocal, engine, Base
import daycare.models  # noqa: F401

from daycare.models.user import User
from daycare.models.section import Section, SectionMember
from daycare.models.schedule import ClassSchedule
from daycare.utils.attendance_time import WEEKDAYS


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        users = [
            User(login_id="admin001", name="Admin Kim", role="admin", email="admin@daycare.local"),
            User(login_id="teacher001", name="Teacher Lee", role="teacher", email="teacher1@daycare.local"),
            User(login_id="parent001", name="Parent Park", role="parent", child_name="Minji Park",
                 phone="+821000000001", rfid_tag="RFID-0001"),
            User(login_id="parent002", name="Parent Choi", role="parent", child_name="Junho Choi",
                 phone="+821000000002", rfid_tag="RFID-0002"),
        ]
        db.add_all(users)
        db.flush()

        section = Section(name="Sunflower", description="Ages 3-4", teacher_id=users[1].user_id)
        db.add(section)
        db.flush()
        db.add_all([
            SectionMember(section_id=section.section_id, user_id=users[2].user_id),
            SectionMember(section_id=section.section_id, user_id=users[3].user_id),
        ])

        # 평일(월~금) 스케줄
        for day in WEEKDAYS[1:6]:
            db.add(ClassSchedule(
                section_id=section.section_id,
                day=day,
                time_in_start="8:00 AM",
                time_in_end="9:00 AM",
                time_out_start="3:00 PM",
                time_out_end="5:00 PM",
                grace_period_minutes=15,
                created_by=users[0].user_id,
            ))

        db.commit()
        print("Seed data inserted successfully.")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
