import click
from flask import Flask, redirect, url_for, request, flash
from flask_login import login_required, current_user
from sqlalchemy.exc import SQLAlchemyError

import auth
import expenses
import views
from auth import bcrypt, csrf_protected, login_manager
from config import Config
from errors import AuthError, CsrfError, NotFoundError, ValidationError
from models import db

EXPENSE_FIELDS = ('spent_on', 'category', 'title', 'amount', 'memo')


def expense_form_values(form):
    return {name: form.get(name, '') for name in EXPENSE_FIELDS}


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config is not None:
        app.config.update(test_config)

    db.init_app(app)
    bcrypt.init_app(app)
    login_manager.init_app(app)

    with app.app_context():
        db.create_all()

    app.jinja_env.globals['csrf_token'] = auth.issue_csrf_token
    app.jinja_env.filters['amount'] = views.format_amount

    register_error_handlers(app)
    register_routes(app)

    @app.cli.command('init-db')
    def init_db_command():
        db.create_all()
        click.echo('Initialized the database.')

    return app


def register_error_handlers(app):
    @app.errorhandler(CsrfError)
    def csrf_failed(e):
        app.logger.warning('Rejected %s %s: %s', request.method, request.path, e)
        return 'Bad Request: invalid CSRF token', 400, {'Content-Type': 'text/plain; charset=utf-8'}

    @app.errorhandler(NotFoundError)
    def not_found(e):
        return 'Not Found', 404, {'Content-Type': 'text/plain; charset=utf-8'}

    @app.errorhandler(SQLAlchemyError)
    def storage_failed(e):
        db.session.rollback()
        app.logger.exception('Storage error on %s %s', request.method, request.path)
        return 'Internal Server Error', 500, {'Content-Type': 'text/plain; charset=utf-8'}


def register_routes(app):

    @app.route('/login', methods=['GET', 'POST'])
    def login():
        if request.method == 'POST':
            auth.verify_csrf(request.form.get(auth.CSRF_FORM_FIELD, ''))
            email = request.form.get('email', '')
            try:
                auth.login(email, request.form.get('password', ''))
            except AuthError as e:
                return views.render_login(error=e.message, email=email)
            return redirect(url_for('list_expenses'))

        if current_user.is_authenticated:
            return redirect(url_for('list_expenses'))
        return views.render_login()

    @app.route('/register', methods=['POST'])
    @csrf_protected
    def register():
        email = request.form.get('email', '')
        try:
            auth.register(email, request.form.get('password', ''))
        except ValidationError as e:
            return views.render_login(register_error=' '.join(e.messages), register_email=email)
        except AuthError as e:
            return views.render_login(register_error=e.message, register_email=email)
        flash('Welcome! Your account has been created.', 'success')
        return redirect(url_for('list_expenses'))

    @app.route('/logout', methods=['POST'])
    @csrf_protected
    @login_required
    def logout():
        app.logger.info('Logged out user_id=%s', current_user.id)
        auth.logout()
        flash('You have been logged out successfully.', 'info')
        return redirect(url_for('login'))

    @app.route('/')
    @login_required
    def list_expenses():
        listing = expenses.list_for_month(current_user.id, request.args.get('ym'))
        return views.render_list(listing)

    @app.route('/new')
    @login_required
    def new_expense():
        return views.render_expense_form('new')

    @app.route('/create', methods=['POST'])
    @csrf_protected
    @login_required
    def create_expense():
        values = expense_form_values(request.form)
        try:
            expenses.create(current_user.id, **values)
        except ValidationError as e:
            return views.render_expense_form('new', values, e.messages)
        flash('Entry added.', 'success')
        return redirect(url_for('list_expenses', ym=values['spent_on'].strip()[:7]))

    @app.route('/edit')
    @login_required
    def edit_expense():
        expense = expenses.find_for_edit(current_user.id, request.args.get('id'))
        return views.render_expense_form('edit', expense.form_values(), expense_id=expense.id)

    @app.route('/update', methods=['POST'])
    @csrf_protected
    @login_required
    def update_expense():
        expense_id = request.form.get('id', '')
        values = expense_form_values(request.form)
        try:
            count = expenses.update(current_user.id, expense_id, **values)
        except ValidationError as e:
            return views.render_expense_form('edit', values, e.messages, expense_id=expense_id)
        if count == 0:
            raise NotFoundError('Expense not found.')
        flash('Entry updated.', 'success')
        return redirect(url_for('list_expenses', ym=values['spent_on'].strip()[:7]))

    @app.route('/delete', methods=['POST'])
    @csrf_protected
    @login_required
    def delete_expense():
        if expenses.delete(current_user.id, request.form.get('id')):
            flash('Entry deleted.', 'success')
        ym = request.form.get('ym', '')
        if expenses.YEAR_MONTH_PATTERN.match(ym):
            return redirect(url_for('list_expenses', ym=ym))
        return redirect(url_for('list_expenses'))


if __name__ == '__main__':
    create_app().run(debug=True)
