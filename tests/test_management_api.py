from bookinghub.models import AuditLog

from conftest import register_owner, onboard


def book(client, start_time='10:00', **customer):
    body = {
        'customer': customer or {'name': 'Dana', 'email': 'dana@example.com'},
        'appointment': {
            'service_id': client.service_id,
            'staff_id': client.staff_id,
            'date': '2024-01-10',
            'start_time': start_time,
        },
    }
    return client.post('/api/appointments', json=body)


def test_update_business_with_explicit_fields(owner_client):
    response = owner_client.put('/api/business', json={'name': 'Shear Delight', 'is_active': False})

    assert response.status_code == 200
    body = response.get_json()
    assert body['name'] == 'Shear Delight'
    assert body['is_active'] is False


def test_update_business_rejects_unknown_fields(owner_client):
    response = owner_client.put('/api/business', json={'owner_id': 2})

    assert response.status_code == 400
    assert response.get_json()['errors'] == {'owner_id': ['Unknown field.']}


def test_service_crud(owner_client):
    created = owner_client.post('/api/services', json={'name': 'Colour', 'price': '80', 'duration': 45})
    assert created.status_code == 201
    service = created.get_json()
    assert service['price'] == 80.0
    assert service['duration'] == 45

    updated = owner_client.put(f"/api/services/{service['id']}", json={'price': '85.50'})
    assert updated.get_json()['price'] == 85.5

    assert owner_client.delete(f"/api/services/{service['id']}").status_code == 204
    names = [s['name'] for s in owner_client.get('/api/services').get_json()]
    assert names == ['Haircut']


def test_booked_service_and_staff_cannot_be_deleted(owner_client):
    assert book(owner_client).status_code == 201

    response = owner_client.delete(f'/api/services/{owner_client.service_id}')
    assert response.status_code == 409
    assert 'Deactivate' in response.get_json()['message']

    assert owner_client.delete(f'/api/staff/{owner_client.staff_id}').status_code == 409

    deactivated = owner_client.put(f'/api/staff/{owner_client.staff_id}', json={'is_active': False})
    assert deactivated.get_json()['is_active'] is False


def test_other_tenants_records_read_as_not_found(owner_client, app):
    other = app.test_client()
    register_owner(other, username='rival', email='rival@example.com')
    onboard(other, name='Rival Cuts')

    assert other.put(f'/api/services/{owner_client.service_id}', json={'name': 'Mine'}).status_code == 404
    assert other.delete(f'/api/staff/{owner_client.staff_id}').status_code == 404
    assert other.get('/api/services').get_json() == []


def test_availability_crud(owner_client):
    url = f'/api/staff/{owner_client.staff_id}/availability'
    created = owner_client.post(url, json={'day_of_week': 2, 'start_time': '09:00', 'end_time': '17:00'})
    assert created.status_code == 201
    window = created.get_json()
    assert window['start_time'] == '09:00'

    bad = owner_client.put(f"/api/availability/{window['id']}", json={'end_time': '08:00'})
    assert bad.status_code == 400
    assert 'end_time' in bad.get_json()['errors']

    ok = owner_client.put(f"/api/availability/{window['id']}", json={'end_time': '12:00'})
    assert ok.get_json()['end_time'] == '12:00'

    assert owner_client.delete(f"/api/availability/{window['id']}").status_code == 204
    assert owner_client.get(url).get_json() == []


def test_blank_updates_are_field_errors(owner_client):
    for body in ({'name': '   '}, {'duration': ''}, {'price': ''}):
        response = owner_client.put(f'/api/services/{owner_client.service_id}', json=body)
        assert response.status_code == 400
        assert set(response.get_json()['errors']) == set(body)

    service = owner_client.get('/api/services').get_json()[0]
    assert service['name'] == 'Haircut'
    assert service['duration'] == 30


def test_blank_availability_update_is_rejected(owner_client):
    created = owner_client.post(f'/api/staff/{owner_client.staff_id}/availability',
                                json={'day_of_week': 2, 'start_time': '09:00', 'end_time': '17:00'})
    url = f"/api/availability/{created.get_json()['id']}"

    assert owner_client.put(url, json={'start_time': ''}).status_code == 400
    assert owner_client.put(url, json={'day_of_week': ''}).status_code == 400
    assert owner_client.put(url, json={'start_time': '10:00'}).get_json()['start_time'] == '10:00'


def test_staff_booking_is_confirmed(owner_client):
    response = book(owner_client)

    assert response.status_code == 201
    appointment = response.get_json()
    assert appointment['status'] == 'confirmed'
    assert appointment['end_time'] == '10:30'
    assert appointment['date'] == '2024-01-10'


def test_staff_booking_conflict_names_the_existing_appointment(owner_client):
    first = book(owner_client).get_json()

    response = book(owner_client, start_time='10:15', name='Sam', phone='555-0199')

    assert response.status_code == 409
    assert response.get_json()['conflicting_appointment_id'] == first['id']


def test_staff_booking_for_existing_customer(owner_client):
    book(owner_client)
    customer = owner_client.get('/api/customers').get_json()[0]

    response = owner_client.post('/api/appointments', json={
        'customer_id': customer['id'],
        'appointment': {
            'service_id': owner_client.service_id,
            'staff_id': owner_client.staff_id,
            'date': '2024-01-10',
            'start_time': '11:00',
        },
    })

    assert response.status_code == 201
    assert response.get_json()['customer_id'] == customer['id']
    assert len(owner_client.get('/api/customers').get_json()) == 1


def test_list_appointments_for_a_day(owner_client):
    book(owner_client, start_time='11:00')
    book(owner_client, start_time='09:00')

    day = owner_client.get('/api/appointments?date=2024-01-10').get_json()
    assert [a['start_time'] for a in day] == ['09:00', '11:00']
    assert owner_client.get('/api/appointments?date=2024-01-11').get_json() == []
    assert owner_client.get('/api/appointments?date=tomorrow').status_code == 400


def test_get_appointment_includes_customer(owner_client):
    appointment = book(owner_client).get_json()

    body = owner_client.get(f"/api/appointments/{appointment['id']}").get_json()
    assert body['customer']['email'] == 'dana@example.com'
    assert owner_client.get('/api/appointments/9999').status_code == 404


def test_status_changes_follow_the_lifecycle(owner_client):
    appointment = book(owner_client).get_json()
    url = f"/api/appointments/{appointment['id']}/status"

    assert owner_client.post(url, json={'status': 'completed'}).get_json()['status'] == 'completed'

    refused = owner_client.post(url, json={'status': 'pending'})
    assert refused.status_code == 409

    unknown = owner_client.post(url, json={'status': 'no_show'})
    assert unknown.status_code == 400


def test_reschedule(owner_client):
    appointment = book(owner_client).get_json()
    blocker = book(owner_client, start_time='12:00', name='Sam', phone='555-0199').get_json()
    url = f"/api/appointments/{appointment['id']}/reschedule"

    moved = owner_client.post(url, json={'date': '2024-01-10', 'start_time': '10:15'})
    assert moved.status_code == 200
    assert moved.get_json()['end_time'] == '10:45'

    clash = owner_client.post(url, json={'date': '2024-01-10', 'start_time': '11:45'})
    assert clash.status_code == 409
    assert clash.get_json()['conflicting_appointment_id'] == blocker['id']


def test_delete_appointment(owner_client):
    booked = book(owner_client).get_json()
    done = book(owner_client, start_time='12:00').get_json()
    owner_client.post(f"/api/appointments/{done['id']}/status", json={'status': 'completed'})

    assert owner_client.delete(f"/api/appointments/{booked['id']}").status_code == 204
    assert owner_client.delete(f"/api/appointments/{done['id']}").status_code == 409
    assert owner_client.get(f"/api/appointments/{booked['id']}").status_code == 404


def test_analytics(owner_client):
    completed = book(owner_client, start_time='09:00').get_json()
    book(owner_client, start_time='10:00', name='Sam', phone='555-0199')
    cancelled = book(owner_client, start_time='11:00').get_json()
    owner_client.post(f"/api/appointments/{completed['id']}/status", json={'status': 'completed'})
    owner_client.post(f"/api/appointments/{cancelled['id']}/status", json={'status': 'cancelled'})

    stats = owner_client.get('/api/analytics').get_json()

    assert stats['total_appointments'] == 3
    assert stats['total_customers'] == 2
    assert stats['total_revenue'] == 30.0
    assert stats['monthly_appointments'] == 3
    assert stats['total_services'] == 1
    assert stats['total_staff'] == 1
    assert stats['status_counts'] == {'pending': 0, 'confirmed': 1, 'completed': 1, 'cancelled': 1}
    assert len(stats['recent_appointments']) == 3


def test_mutations_are_audited(owner_client, app):
    appointment = book(owner_client).get_json()
    owner_client.post(f"/api/appointments/{appointment['id']}/status", json={'status': 'cancelled'})

    with app.app_context():
        entries = AuditLog.query.filter_by(business_id=owner_client.business_id).order_by(AuditLog.id).all()
        actions = [(e.action, e.entity_type) for e in entries]

    assert ('create', 'service') in actions
    assert ('create', 'appointment') in actions
    assert actions[-1] == ('update', 'appointment_status')
    assert all(e.user_id is not None for e in entries)
