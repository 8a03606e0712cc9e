from models import User

CSRF = 'test-csrf-token'


def post(client, path, data=None, csrf=CSRF, **kwargs):
    data = dict(data or {})
    if csrf is not None:
        data['csrf_token'] = csrf
    return client.post(path, data=data, **kwargs)


def register(client, email='alice@example.com', password='secret'):
    return post(client, '/register', {'email': email, 'password': password})


def user_id(app, email='alice@example.com'):
    with app.app_context():
        return User.query.filter_by(email=email).one().id


def expense_form(**overrides):
    form = {
        'spent_on': '2024-02-10',
        'category': 'Food',
        'title': 'Lunch',
        'amount': '1000',
        'memo': '',
    }
    form.update(overrides)
    return form
