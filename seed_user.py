from configs import db
from dao import user as user_dao
from db.models.user import User, UserRole
from app import create_app

USERS = [
    dict(username="admin", password="1", full_name="System Admin", role=UserRole.ADMIN),
    dict(
        username="cashier1",
        password="1",
        full_name="Main Street Cashier",
        role=UserRole.STAFF,
        accesses=["Dashboard", "Add Item Stock", "Add Return Stock", "Cash Management"],
        assigned_branches=["Main Street"],
    ),
    dict(
        username="manager1",
        password="1",
        full_name="Area Manager",
        role=UserRole.STAFF,
        accesses=["Dashboard", "Internal Transfer", "Reports", "Expire Tracking"],
        assigned_branches=["Main Street", "Lake Road", "Hill Side"],
    ),
]

if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        for u in USERS:
            if not User.query.filter_by(username=u["username"]).first():
                user_dao.create_user(**u)
        db.session.commit()
        print("✅ Seeded users")
