from extensions import db

class Patient(db.Model):
    __tablename__ = "patients"

    id = db.Column(db.String(64), primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    phone = db.Column(db.String(40), nullable=False)
    email = db.Column(db.String(255))
    birth_date = db.Column(db.String(10))
    address = db.Column(db.String(255))
    allergies = db.Column(db.Text)
    created_at = db.Column(db.String(40), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "birth_date": self.birth_date,
            "address": self.address,
            "allergies": self.allergies,
            "created_at": self.created_at,
        }
