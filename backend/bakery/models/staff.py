from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .common import new_id


ROLE_MANAGER = "Manager"
ROLE_DEVELOPER = "Developer"
ROLE_SUPERVISOR = "Supervisor"
ROLE_STOREKEEPER = "Storekeeper"
ROLE_ACCOUNTANT = "Accountant"
ROLE_BAKER = "Baker"
ROLE_CHIEF_BAKER = "Chief Baker"
ROLE_DELIVERY = "Delivery Staff"
ROLE_SHOWROOM = "Showroom Staff"

VALID_ROLES = [
    ROLE_MANAGER,
    ROLE_DEVELOPER,
    ROLE_SUPERVISOR,
    ROLE_STOREKEEPER,
    ROLE_ACCOUNTANT,
    ROLE_BAKER,
    ROLE_CHIEF_BAKER,
    ROLE_DELIVERY,
    ROLE_SHOWROOM,
]

# Roles whose waste and adjustments act on central inventory rather than personal stock
CENTRAL_STOCK_ROLES = {ROLE_MANAGER, ROLE_DEVELOPER, ROLE_SUPERVISOR, ROLE_STOREKEEPER}

# Wages for these roles are booked as direct (production) costs
PRODUCTION_ROLES = {ROLE_CHIEF_BAKER, ROLE_BAKER}

PAY_TYPE_SALARY = "Salary"
PAY_TYPE_HOURLY = "Hourly"
PAY_TYPES = [PAY_TYPE_SALARY, PAY_TYPE_HOURLY]


class Staff(db.Model):
    """
    A staff member. The staff_id is the login identifier shown on badges.

    Each staff member may hold personal stock (products received through
    transfers and not yet sold or returned).
    """
    __tablename__ = "staff"

    staff_id = db.Column(db.String(32), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True, unique=True)
    role = db.Column(db.String(32), nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    mfa_enabled = db.Column(db.Boolean, nullable=False, default=False)
    theme = db.Column(db.String(32), nullable=True)
    pay_type = db.Column(db.String(16), nullable=False, default=PAY_TYPE_SALARY)
    pay_rate = db.Column(db.Float, nullable=False, default=0.0)
    bank_name = db.Column(db.String(255), nullable=True)
    account_number = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    personal_stock = db.relationship("PersonalStock", back_populates="staff", lazy=True)
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Staff staff_id={self.staff_id!r} name={self.name!r} role={self.role!r}>"

    def to_dict(self) -> dict:
        return {
            "staff_id": self.staff_id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "is_active": self.is_active,
            "mfa_enabled": self.mfa_enabled,
            "theme": self.theme,
            "pay_type": self.pay_type,
            "pay_rate": self.pay_rate,
            "bank_name": self.bank_name,
            "account_number": self.account_number,
            "created_at": to_utc_z(self.created_at),
        }


class SessionToken(db.Model):
    """
    Login session. Only the SHA-256 of the token is stored.
    """
    __tablename__ = "session_tokens"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    staff_id = db.Column(db.String(32), db.ForeignKey("staff.staff_id"), nullable=False, index=True)
    token_hash = db.Column(db.String(64), nullable=False, unique=True, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)

    staff = db.relationship("Staff")
