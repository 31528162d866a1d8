from conftest import register_owner, onboard


def test_register_logs_the_user_in(client):
    user = register_owner(client)

    response = client.get('/api/user')
    assert response.status_code == 200
    body = response.get_json()
    assert body['id'] == user['id']
    assert body['business'] is None
    assert 'password_hash' not in body


def test_duplicate_username_and_email_are_rejected(client):
    register_owner(client)
    client.post('/api/logout')

    response = client.post('/api/register', json={
        'username': 'owner',
        'email': 'owner@example.com',
        'password': 'password123',
    })

    assert response.status_code == 400
    assert set(response.get_json()['errors']) == {'username', 'email'}


def test_short_password_is_rejected(client):
    response = client.post('/api/register', json={
        'username': 'owner',
        'email': 'owner@example.com',
        'password': 'short',
    })

    assert response.status_code == 400
    assert 'password' in response.get_json()['errors']


def test_login_and_logout(client):
    register_owner(client)
    client.post('/api/logout')
    assert client.get('/api/user').status_code == 401

    bad = client.post('/api/login', json={'username': 'owner', 'password': 'wrong-password'})
    assert bad.status_code == 401

    good = client.post('/api/login', json={'username': 'owner', 'password': 'password123'})
    assert good.status_code == 200
    assert client.get('/api/user').status_code == 200


def test_management_api_requires_login(client):
    response = client.get('/api/services')

    assert response.status_code == 401
    assert response.get_json() == {'message': 'Unauthorized'}


def test_management_api_requires_onboarding(client):
    register_owner(client)

    response = client.get('/api/services')
    assert response.status_code == 404
    assert response.get_json()['message'] == 'Business not found'

    onboard(client)
    assert client.get('/api/services').status_code == 200
    assert client.get('/api/user').get_json()['business']['name'] == 'Shear Joy'


def test_only_one_business_per_owner(client):
    register_owner(client)
    onboard(client)

    response = client.post('/api/business', json={
        'name': 'Second',
        'industry': 'salon',
        'email': 'second@example.com',
        'phone': '555-0101',
    })
    assert response.status_code == 400
