from conftest import PASSWORD, USERNAME


def _login(client, **data):
    return client.post('/login', data=data, follow_redirects=False)


def test_protected_page_redirects_to_login(client):
    response = client.get('/vehicles/3', follow_redirects=False)
    assert response.status_code == 303
    assert response.headers['location'] == '/login?redirect_to=%2Fvehicles%2F3'


def test_login_page(client):
    response = client.get('/login', params={'message': 'Signed out', 'redirect_to': '/vehicles'})
    assert response.status_code == 200
    assert response.json() == {'message': 'Signed out', 'redirect_to': '/vehicles'}


def test_login_page_drops_unsafe_redirect(client):
    response = client.get('/login', params={'redirect_to': '//evil.com'})
    assert response.json()['redirect_to'] == '/'


def test_login_sets_session_and_redirects(client, user):
    response = _login(client, username=USERNAME.upper(), password=PASSWORD, redirect_to='/vehicles/5')
    assert response.status_code == 303
    assert response.headers['location'] == '/vehicles/5'
    assert client.cookies.get('auth_token')

    account = client.get('/account')
    assert account.status_code == 200
    assert account.json() == {'id': user.id, 'username': USERNAME}


def test_login_ignores_external_redirect(client, user):
    response = _login(client, username=USERNAME, password=PASSWORD, redirect_to='http://evil.com')
    assert response.status_code == 303
    assert response.headers['location'] == '/'


def test_login_failures_look_the_same(client, user):
    wrong_password = _login(client, username=USERNAME, password='not-it')
    unknown_user = _login(client, username='nobody', password=PASSWORD)

    for response in (wrong_password, unknown_user):
        assert response.status_code == 400
        body = response.json()
        assert body['form_error'] == 'Incorrect credentials'
        assert body['field_errors'] == {}
    assert wrong_password.json()['fields']['username'] == USERNAME
    assert 'auth_token' not in client.cookies


def test_login_validation_errors(client):
    response = _login(client, username='', password='')
    assert response.status_code == 400
    assert set(response.json()['field_errors']) == {'username', 'password'}


def test_login_page_redirects_signed_in_user(auth_client):
    response = auth_client.get('/login', follow_redirects=False)
    assert response.status_code == 303
    assert response.headers['location'] == '/'


def test_create_account_signs_in(client):
    response = client.post('/join', data={
        'username': ' New_Officer ',
        'password': 'abcd',
        'password_confirmation': 'abcd',
    }, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers['location'] == '/'

    assert client.get('/account').json()['username'] == 'new_officer'


def test_create_account_password_mismatch(client):
    fields = {'username': 'new_officer', 'password': 'abcd', 'password_confirmation': 'abce'}
    response = client.post('/join', data=fields, follow_redirects=False)
    assert response.status_code == 400
    body = response.json()
    assert body['fields'] == fields
    assert body['field_errors'] == {'password_confirmation': ["Passwords don't match"]}
    assert 'auth_token' not in client.cookies


def test_create_account_duplicate_username(client, user):
    response = client.post('/join', data={
        'username': USERNAME.upper(),
        'password': 'abcd',
        'password_confirmation': 'abcd',
    }, follow_redirects=False)
    assert response.status_code == 400
    assert response.json()['field_errors'] == {'username': ['A user already exists with this username']}


def test_logout_clears_session(auth_client):
    response = auth_client.post('/logout', follow_redirects=False)
    assert response.status_code == 303
    assert response.headers['location'] == '/login'

    response = auth_client.get('/vehicles', follow_redirects=False)
    assert response.status_code == 303
    assert response.headers['location'].startswith('/login')


def test_session_for_deleted_user_is_rejected(auth_client, db, user):
    db.delete(user)
    db.commit()

    response = auth_client.get('/account', follow_redirects=False)
    assert response.status_code == 303
    assert response.headers['location'] == '/login?redirect_to=%2Faccount'


def test_change_username(auth_client):
    response = auth_client.post('/account/username', data={'username': 'Chief'}, follow_redirects=False)
    assert response.status_code == 303
    assert auth_client.get('/account').json()['username'] == 'chief'


def test_change_username_taken(auth_client, db):
    from roadblock.credentials import CredentialStore

    CredentialStore(db).create('chief', 'abcd')
    response = auth_client.post('/account/username', data={'username': 'chief'}, follow_redirects=False)
    assert response.status_code == 400
    assert response.json()['field_errors'] == {'username': ['A user already exists with this username']}


def test_change_password(auth_client):
    response = auth_client.post('/account/password', data={
        'current_password': PASSWORD,
        'new_password': 'brand-new',
        'password_confirmation': 'brand-new',
    }, follow_redirects=False)
    assert response.status_code == 303

    auth_client.post('/logout')
    assert _login(auth_client, username=USERNAME, password=PASSWORD).status_code == 400
    assert _login(auth_client, username=USERNAME, password='brand-new').status_code == 303


def test_change_password_requires_current_password(auth_client):
    response = auth_client.post('/account/password', data={
        'current_password': 'not-it',
        'new_password': 'brand-new',
        'password_confirmation': 'brand-new',
    }, follow_redirects=False)
    assert response.status_code == 400
    assert response.json()['form_error'] == 'Incorrect current password'


def test_change_password_requires_session(client):
    response = client.post('/account/password', data={}, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers['location'] == '/login?redirect_to=%2F'
