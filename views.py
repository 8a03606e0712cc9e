from datetime import date

from flask import current_app, render_template

EMPTY_FORM = {'spent_on': '', 'category': '', 'title': '', 'amount': '', 'memo': ''}


def format_amount(value):
    return f"{int(value or 0):,} {current_app.config.get('CURRENCY_LABEL', '')}".rstrip()


def render_login(error=None, email='', register_error=None, register_email=''):
    return render_template(
        'login.html',
        error=error,
        email=email,
        register_error=register_error,
        register_email=register_email,
    )


def render_expense_form(mode, values=None, errors=None, expense_id=None):
    """``mode`` is 'new' or 'edit'. Submitted values are echoed back as-is."""
    form = dict(EMPTY_FORM)
    if values:
        form.update({key: values.get(key) or '' for key in EMPTY_FORM})
    if mode == 'new' and not form['spent_on'] and not errors:
        form['spent_on'] = date.today().isoformat()
    return render_template(
        'expense_form.html',
        mode=mode,
        form=form,
        errors=errors or [],
        expense_id=expense_id,
    )


def render_list(listing):
    return render_template('list.html', listing=listing)
