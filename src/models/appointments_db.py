from extensions import db

class Appointment(db.Model):
    __tablename__ = "appointments"

    id = db.Column(db.String(64), primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    patient_id = db.Column(db.String(64), nullable=False, index=True)
    date = db.Column(db.String(10), nullable=False)
    time = db.Column(db.String(5), nullable=False)
    reason = db.Column(db.String(255))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "patient_id": self.patient_id,
            "date": self.date,
            "time": self.time,
            "reason": self.reason,
        }
