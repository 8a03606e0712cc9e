import re
from dataclasses import dataclass, field
from datetime import date, datetime

from flask import current_app
from sqlalchemy import func

from errors import NotFoundError, ValidationError
from models import db, Expense, AMOUNT_MAX, CATEGORY_MAX_LENGTH, TITLE_MAX_LENGTH

DATE_PATTERN = re.compile(r'^[0-9]{4}-[0-9]{2}-[0-9]{2}$')
YEAR_MONTH_PATTERN = re.compile(r'^([0-9]{4})-(0[1-9]|1[0-2])$')
AMOUNT_PATTERN = re.compile(r'^[0-9]{1,10}$')

# date(MAX_YEAR + 1, 1, 1) must still exist for the half-open month range
MIN_YEAR = 1
MAX_YEAR = 9998


@dataclass
class MonthListing:
    ym: str
    rows: list
    total: int
    previous_ym: str
    next_ym: str
    by_category: list = field(default_factory=list)


def parse_id(raw):
    """Positive integer id from a form/query value, or None."""
    raw = str(raw or '').strip()
    if not AMOUNT_PATTERN.match(raw):
        return None
    value = int(raw)
    return value if 0 < value <= AMOUNT_MAX else None


def parse_year_month(ym, today=None):
    match = YEAR_MONTH_PATTERN.match(ym or '')
    if match and MIN_YEAR <= int(match.group(1)) <= MAX_YEAR:
        return int(match.group(1)), int(match.group(2))
    today = today or date.today()
    return today.year, today.month


def shift_month(year, month, delta):
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_range(year, month):
    """Half-open [first of month, first of next month)."""
    next_year, next_month = shift_month(year, month, 1)
    return date(year, month, 1), date(next_year, next_month, 1)


def format_year_month(year, month):
    return f'{year:04d}-{month:02d}'


def validate_expense(spent_on, category, title, amount, memo):
    spent_on = (spent_on or '').strip()
    category = (category or '').strip()
    title = (title or '').strip()
    amount = (amount or '').strip()
    memo = (memo or '').strip()

    errors = []
    parsed_date = None
    if DATE_PATTERN.match(spent_on):
        try:
            parsed_date = datetime.strptime(spent_on, '%Y-%m-%d').date()
        except ValueError:
            pass
    if parsed_date is None or not MIN_YEAR <= parsed_date.year <= MAX_YEAR:
        errors.append('Date must be a valid YYYY-MM-DD date.')
    if not category:
        errors.append('Category is required.')
    elif len(category) > CATEGORY_MAX_LENGTH:
        errors.append(f'Category must be at most {CATEGORY_MAX_LENGTH} characters.')
    if not title:
        errors.append('Title is required.')
    elif len(title) > TITLE_MAX_LENGTH:
        errors.append(f'Title must be at most {TITLE_MAX_LENGTH} characters.')
    if not AMOUNT_PATTERN.match(amount) or int(amount) <= 0:
        errors.append('Amount must be a positive whole number.')
    elif int(amount) > AMOUNT_MAX:
        errors.append(f'Amount must be at most {AMOUNT_MAX:,}.')
    if errors:
        raise ValidationError(errors)

    return {
        'spent_on': parsed_date,
        'category': category,
        'title': title,
        'amount': int(amount),
        'memo': memo or None,
    }


def create(user_id, spent_on, category, title, amount, memo):
    values = validate_expense(spent_on, category, title, amount, memo)
    expense = Expense(user_id=user_id, **values)
    db.session.add(expense)
    db.session.commit()
    current_app.logger.info('Created expense id=%s user_id=%s', expense.id, user_id)
    return expense.id


def update(user_id, expense_id, spent_on, category, title, amount, memo):
    """Returns the number of rows changed: 0 when the id isn't the user's."""
    parsed_id = parse_id(expense_id)
    try:
        values = validate_expense(spent_on, category, title, amount, memo)
    except ValidationError as exc:
        if parsed_id is None:
            exc.messages.insert(0, 'Invalid entry id.')
        raise
    if parsed_id is None:
        raise ValidationError('Invalid entry id.')

    count = (
        Expense.query
        .filter(Expense.id == parsed_id, Expense.user_id == user_id)
        .update(values, synchronize_session=False)
    )
    db.session.commit()
    current_app.logger.info('Updated expense id=%s user_id=%s rows=%s', parsed_id, user_id, count)
    return count


def delete(user_id, expense_id):
    parsed_id = parse_id(expense_id)
    if parsed_id is None:
        return 0
    count = (
        Expense.query
        .filter(Expense.id == parsed_id, Expense.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.session.commit()
    current_app.logger.info('Deleted expense id=%s user_id=%s rows=%s', parsed_id, user_id, count)
    return count


def find_for_edit(user_id, expense_id):
    parsed_id = parse_id(expense_id)
    expense = None
    if parsed_id is not None:
        expense = Expense.query.filter_by(id=parsed_id, user_id=user_id).first()
    if expense is None:
        raise NotFoundError('Expense not found.')
    return expense


def list_for_month(user_id, ym=None, today=None):
    year, month = parse_year_month(ym, today)
    start, end = month_range(year, month)

    in_month = (
        Expense.user_id == user_id,
        Expense.spent_on >= start,
        Expense.spent_on < end,
    )
    rows = (
        Expense.query.filter(*in_month)
        .order_by(Expense.spent_on.desc(), Expense.id.desc())
        .all()
    )
    total = db.session.query(func.sum(Expense.amount)).filter(*in_month).scalar() or 0

    subtotal = func.sum(Expense.amount).label('subtotal')
    by_category = (
        db.session.query(Expense.category, subtotal)
        .filter(*in_month)
        .group_by(Expense.category)
        .order_by(subtotal.desc(), Expense.category)
        .all()
    )

    return MonthListing(
        ym=format_year_month(year, month),
        rows=rows,
        total=int(total),
        previous_ym=format_year_month(*shift_month(year, month, -1)),
        next_ym=format_year_month(*shift_month(year, month, 1)),
        by_category=[(category, int(amount)) for category, amount in by_category],
    )
