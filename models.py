from datetime import datetime

from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin

db = SQLAlchemy()

CATEGORY_MAX_LENGTH = 100
TITLE_MAX_LENGTH = 200
AMOUNT_MAX = 2147483647  # 32-bit INTEGER on PostgreSQL


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(200), nullable=False)

    expenses = db.relationship('Expense', backref='owner', lazy=True)


class Expense(db.Model):
    __tablename__ = 'expenses'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    spent_on = db.Column(db.Date, nullable=False)

    category = db.Column(db.String(CATEGORY_MAX_LENGTH), nullable=False)
    title = db.Column(db.String(TITLE_MAX_LENGTH), nullable=False)
    amount = db.Column(db.Integer, nullable=False)            # smallest currency unit
    memo = db.Column(db.Text, nullable=True)                  # NULL, never ''
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    def form_values(self):
        """Field values as the expense form expects them."""
        return {
            'spent_on': self.spent_on.isoformat(),
            'category': self.category,
            'title': self.title,
            'amount': str(self.amount),
            'memo': self.memo or '',
        }
