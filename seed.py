from sqlmodel import Session, SQLModel, select

from waste_rewards.db import create_db_and_tables, engine
from waste_rewards.models import RewardOffer, TransactionType
from waste_rewards.services import collection, ledger
from waste_rewards.services.accounts import get_or_create_user

OFFERS = [
    ("Reusable Tote Bag", 50, "A sturdy cotton tote for your shopping.", "Pick up at any community recycling centre."),
    ("Compost Starter Kit", 150, "Bin, aerator and a bag of starter mix.", "Delivered within two weeks."),
    ("Tree Planting Certificate", 300, "We plant a tree in your name.", "Certificate sent by email."),
]


def seed(reset: bool = False) -> None:
    if reset:
        SQLModel.metadata.drop_all(engine)
    create_db_and_tables()

    with Session(engine) as session:
        for name, cost, description, info in OFFERS:
            exists = session.exec(select(RewardOffer).where(RewardOffer.name == name)).first()
            if not exists:
                ledger.create_offer(session, name, cost, description=description, collection_info=info)

        reporter, created = get_or_create_user(session, "reporter@example.com", "Riley Reporter")
        collector, _ = get_or_create_user(session, "collector@example.com", "Casey Collector")
        admin, _ = get_or_create_user(session, "admin@example.com", "Alex Admin")
        if admin.role != "admin":
            admin.role = "admin"
            session.add(admin)
            session.commit()
        if created:
            collection.create_report(session, reporter.id, "12 Harbour St", "plastic", "3 kg")
            collection.create_report(session, reporter.id, "Central Park north gate", "glass", "5 bottles")
            ledger.credit(session, collector.id, 40, TransactionType.EARNED_COLLECT, "Opening balance")

    print("Database seeded. Sign in as reporter@example.com, collector@example.com or admin@example.com")


if __name__ == "__main__":
    seed(reset=True)
