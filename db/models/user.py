# db/models/user.py
import enum
from datetime import datetime
from configs import db
from flask_login import UserMixin


class UserRole(enum.Enum):
    ADMIN = "ADMIN"
    STAFF = "STAFF"


# Pages a non-admin user can be granted
ALL_ACCESS_OPTIONS = [
    "Dashboard",
    "Master Creation",
    "Add Item Stock",
    "Internal Transfer",
    "Add Return Stock",
    "Cash Management",
    "Reports",
    "Expire Tracking",
    "Branch Management",
    "User Management",
]


class User(db.Model, UserMixin):
    __tablename__ = "user_account"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(120))
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    role = db.Column(db.Enum(UserRole), default=UserRole.STAFF, nullable=False)
    accesses = db.Column(db.JSON, default=list)
    assigned_branches = db.Column(db.JSON, default=list)
    last_login = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def get_id(self):
        return str(self.id)

    def has_role(self, *roles: UserRole):
        return self.role in roles

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def can_access(self, page: str) -> bool:
        return self.is_admin or page in (self.accesses or [])

    def can_use_branch(self, branch: str) -> bool:
        return self.is_admin or branch in (self.assigned_branches or [])
