from extensions import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(64), primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    clinic_name = db.Column(db.String(200), nullable=False)
    created_at = db.Column(db.String(40), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "clinic_name": self.clinic_name,
            "created_at": self.created_at,
        }


class SessionSlot(db.Model):
    """Named JSON slot; holds the single signed-in user between restarts."""
    __tablename__ = "session_slots"

    key = db.Column(db.String(64), primary_key=True)
    value = db.Column(db.Text, nullable=False)
