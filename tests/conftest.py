"""
Test configuration and fixtures.

Provides:
- A fresh app per test backed by an in-memory SQLite database
- A booking engine running on a fixed clock (Monday 2024-01-08 09:00)
- A seeded tenant: owner, business, two services and one staff member
- A logged-in Flask test client for the management API
"""
from datetime import datetime
from decimal import Decimal

import pytest

from bookinghub import create_app, db
from bookinghub.booking import BookingEngine, booking_engine
from bookinghub.storage import storage

NOW = datetime(2024, 1, 8, 9, 0)


@pytest.fixture()
def app():
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-key',
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'AUTO_CREATE_TABLES': True,
        'LOG_LEVEL': 'DEBUG',
    })
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture()
def app_ctx(app):
    """Pushed app context for tests that call the core directly"""
    with app.app_context():
        yield app


@pytest.fixture()
def engine(app_ctx):
    return BookingEngine(storage, clock=lambda: NOW)


@pytest.fixture(autouse=True)
def fixed_clock(monkeypatch):
    # The HTTP layer uses the module-level engine
    monkeypatch.setattr(booking_engine, '_clock', lambda: NOW)


@pytest.fixture()
def tenant(app_ctx):
    user = storage.create_user('owner', 'owner@example.com', 'password123')
    business = storage.create_business(
        user.id, name='Shear Joy', industry='salon', email='hello@shearjoy.example.com', phone='555-0100'
    )
    haircut = storage.create_service(business.id, name='Haircut', price=Decimal('30.00'), duration=30)
    colour = storage.create_service(business.id, name='Colour', price=Decimal('80.00'), duration=45)
    staff_member = storage.create_staff(business.id, name='Alex', email='alex@shearjoy.example.com')
    db.session.commit()

    class Tenant:
        pass

    t = Tenant()
    t.user, t.business, t.haircut, t.colour, t.staff = user, business, haircut, colour, staff_member
    return t


@pytest.fixture()
def client(app):
    return app.test_client()


def register_owner(client, username='owner', email='owner@example.com'):
    response = client.post('/api/register', json={
        'username': username,
        'email': email,
        'password': 'password123',
    })
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def onboard(client, name='Shear Joy'):
    response = client.post('/api/business', json={
        'name': name,
        'industry': 'salon',
        'email': 'hello@shearjoy.example.com',
        'phone': '555-0100',
    })
    assert response.status_code == 201, response.get_json()
    return response.get_json()


@pytest.fixture()
def owner_client(client):
    """Client logged in as an owner who has finished onboarding, with one service and one staff member"""
    register_owner(client)
    business = onboard(client)

    service = client.post('/api/services', json={'name': 'Haircut', 'price': '30.00', 'duration': 30})
    assert service.status_code == 201, service.get_json()
    staff = client.post('/api/staff', json={'name': 'Alex', 'email': 'alex@shearjoy.example.com'})
    assert staff.status_code == 201, staff.get_json()

    client.business_id = business['id']
    client.service_id = service.get_json()['id']
    client.staff_id = staff.get_json()['id']
    return client
