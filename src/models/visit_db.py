from extensions import db

class Visit(db.Model):
    __tablename__ = "visits"

    id = db.Column(db.String(64), primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    # No foreign key: patients are never deleted and nothing cascades
    patient_id = db.Column(db.String(64), nullable=False, index=True)
    date = db.Column(db.String(10), nullable=False)
    treatment = db.Column(db.Text, nullable=False)
    notes = db.Column(db.Text)
    cost = db.Column(db.Float)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "patient_id": self.patient_id,
            "date": self.date,
            "treatment": self.treatment,
            "notes": self.notes,
            "cost": self.cost,
        }
