from datetime import date

from sqlmodel import Session, select

from availability import Slot, Status
from db import engine
from models import Mukkadam
from store import save_slots


def seed_database():
    """Seed the database with a sample roster."""
    with Session(engine) as session:
        # Check if data already exists
        existing = session.exec(select(Mukkadam)).first()
        if existing:
            print("Database already has data, skipping seed.")
            return

        sample_mukkadams = [
            Mukkadam(name="Ramesh Pawar", mobile="9876543210", village="Baramati", crew_size="12", has_smartphone=True),
            Mukkadam(name="Ramesh Jadhav", mobile="9876501234, 9822001100", village="Indapur", crew_size="8"),
            Mukkadam(name="Ramesh Shinde", mobile="9890012345", village="Indapur", crew_size="15", max_crew_capacity="20"),
            Mukkadam(
                name="Suresh Kale",
                mobile="9765432100",
                village="Daund",
                crew_size="10",
                has_smartphone=True,
                start_date=date(2024, 6, 1),
                end_date=date(2024, 6, 30),
            ),
        ]

        session.add_all(sample_mukkadams)
        session.commit()
        for mukkadam in sample_mukkadams:
            session.refresh(mukkadam)

        save_slots(session, sample_mukkadams[0].id, [
            Slot(date(2024, 6, 1), date(2024, 6, 10), Status.AVAILABLE),
            Slot(date(2024, 6, 11), date(2024, 6, 14), Status.BUSY, "Sugarcane harvest, Phaltan"),
        ])
        save_slots(session, sample_mukkadams[1].id, [
            Slot(date(2024, 6, 5), date(2024, 6, 20), Status.LEAVE, "Family wedding"),
        ])
        session.commit()
        print(f"Seeded database with {len(sample_mukkadams)} sample mukkadams.")


if __name__ == "__main__":
    from db import create_db_and_tables

    create_db_and_tables()
    seed_database()
