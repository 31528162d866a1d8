"""Persistence gateway.

Typed access to tenant-scoped records. Getters return ``None`` when a row
does not exist (or belongs to another business) instead of raising.
Mutating methods add and flush but never commit; callers group them in
``transaction()`` which commits once, rolls back on any error and turns
SQLAlchemy failures into ``PersistenceError``.
"""
from contextlib import contextmanager

from flask import current_app
from sqlalchemy import event, func
from sqlalchemy.exc import SQLAlchemyError

from bookinghub import db, query_cache
from bookinghub.errors import PersistenceError
from bookinghub.models import (
    User, Business, Service, Staff, Availability, Customer, Appointment
)
from bookinghub.models.appointment import STATUS_CANCELLED


def use_immediate_transactions(engine):
    """Open every SQLite transaction with BEGIN IMMEDIATE.

    pysqlite defers BEGIN until the first write, so two bookings could both
    read a free slot before either inserts. Taking the write lock up front
    makes the second booking wait for the first to commit, then see its row.
    """

    @event.listens_for(engine, 'connect')
    def disable_implicit_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, 'begin')
    def begin_immediate(conn):
        conn.exec_driver_sql('BEGIN IMMEDIATE')


def catalog_key(business_id):
    return ('catalog', business_id)


class Storage:

    def __init__(self, session=None, cache=None):
        self._session = session
        self.cache = cache if cache is not None else query_cache

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def _tx_state(self):
        # Kept on the session so concurrent requests never share it
        return self.session.info.setdefault('bookinghub.tx', {'depth': 0, 'stale': set()})

    # Transactions

    @contextmanager
    def transaction(self, step='transaction'):
        """Commit everything done inside the block, or nothing.

        Nested use joins the outermost block; only that one commits.
        """
        state = self._tx_state()
        state['depth'] += 1
        try:
            yield self.session
            if state['depth'] == 1:
                self.session.commit()
        except SQLAlchemyError as e:
            self._abort(state)
            raise PersistenceError(step, e) from e
        except BaseException:
            self._abort(state)
            raise
        else:
            if state['depth'] == 1:
                self._flush_stale_keys(state)
        finally:
            state['depth'] -= 1

    def _abort(self, state):
        if state['depth'] == 1:
            self.session.rollback()
            state['stale'].clear()

    def _flush_stale_keys(self, state):
        if state['stale']:
            self.cache.invalidate(*state['stale'])
            current_app.logger.debug(f"Invalidated cache keys {sorted(state['stale'])}")
            state['stale'].clear()

    def _touch(self, *keys):
        state = self._tx_state()
        state['stale'].update(keys)
        if state['depth'] == 0:
            # No transaction block to wait for; the caller commits directly
            self._flush_stale_keys(state)

    def _add(self, obj):
        self.session.add(obj)
        self.session.flush()
        return obj

    @staticmethod
    def _apply(obj, changes):
        for field, value in changes.items():
            setattr(obj, field, value)
        return obj

    def _get(self, model, id):
        if id is None:
            return None
        return self.session.get(model, id)

    # User methods

    def get_user_by_username(self, username):
        return self.session.query(User).filter_by(username=username).first()

    def get_user_by_email(self, email):
        return self.session.query(User).filter_by(email=email).first()

    def create_user(self, username, email, password):
        return self._add(User(username=username, email=email, password=password))

    # Business methods

    def get_business(self, id):
        return self._get(Business, id)

    def get_business_by_user_id(self, user_id):
        return self.session.query(Business).filter_by(user_id=user_id).first()

    def create_business(self, user_id, **fields):
        business = self._add(Business(user_id=user_id, **fields))
        self._touch(catalog_key(business.id))
        return business

    def update_business(self, business, changes):
        self._apply(business, changes)
        self.session.flush()
        self._touch(catalog_key(business.id))
        return business

    # Service methods

    def get_services(self, business_id, active_only=False):
        query = self.session.query(Service).filter_by(business_id=business_id)
        if active_only:
            query = query.filter_by(is_active=True)
        return query.order_by(Service.name).all()

    def get_service(self, id, business_id=None):
        service = self._get(Service, id)
        if service is None or (business_id is not None and service.business_id != business_id):
            return None
        return service

    def create_service(self, business_id, **fields):
        service = self._add(Service(business_id=business_id, **fields))
        self._touch(catalog_key(business_id))
        return service

    def update_service(self, service, changes):
        self._apply(service, changes)
        self.session.flush()
        self._touch(catalog_key(service.business_id))
        return service

    def delete_service(self, service):
        self.session.delete(service)
        self.session.flush()
        self._touch(catalog_key(service.business_id))

    def count_service_appointments(self, service_id):
        return self.session.query(func.count(Appointment.id)).filter(
            Appointment.service_id == service_id
        ).scalar()

    # Staff methods

    def get_staff(self, business_id, active_only=False):
        query = self.session.query(Staff).filter_by(business_id=business_id)
        if active_only:
            query = query.filter_by(is_active=True)
        return query.order_by(Staff.name).all()

    def get_staff_member(self, id, business_id=None):
        staff_member = self._get(Staff, id)
        if staff_member is None or (business_id is not None and staff_member.business_id != business_id):
            return None
        return staff_member

    def lock_staff_member(self, id, business_id=None):
        """Load a staff row with a write lock held until the transaction ends"""
        query = self.session.query(Staff).filter(Staff.id == id)
        if business_id is not None:
            query = query.filter(Staff.business_id == business_id)
        return query.with_for_update().first()

    def create_staff(self, business_id, **fields):
        staff_member = self._add(Staff(business_id=business_id, **fields))
        self._touch(catalog_key(business_id))
        return staff_member

    def update_staff(self, staff_member, changes):
        self._apply(staff_member, changes)
        self.session.flush()
        self._touch(catalog_key(staff_member.business_id))
        return staff_member

    def delete_staff(self, staff_member):
        self.session.delete(staff_member)
        self.session.flush()
        self._touch(catalog_key(staff_member.business_id))

    def count_staff_appointments(self, staff_id):
        return self.session.query(func.count(Appointment.id)).filter(
            Appointment.staff_id == staff_id
        ).scalar()

    # Availability methods

    def get_availability(self, staff_id, day_of_week=None, active_only=False):
        query = self.session.query(Availability).filter_by(staff_id=staff_id)
        if day_of_week is not None:
            query = query.filter_by(day_of_week=day_of_week)
        if active_only:
            query = query.filter_by(is_active=True)
        return query.order_by(Availability.day_of_week, Availability.start_time).all()

    def get_availability_window(self, id, business_id=None):
        window = self._get(Availability, id)
        if window is None:
            return None
        if business_id is not None and window.staff.business_id != business_id:
            return None
        return window

    def create_availability(self, staff_id, **fields):
        return self._add(Availability(staff_id=staff_id, **fields))

    def update_availability(self, window, changes):
        self._apply(window, changes)
        self.session.flush()
        return window

    def delete_availability(self, window):
        self.session.delete(window)
        self.session.flush()

    # Customer methods

    def get_customers(self, business_id):
        return self.session.query(Customer).filter_by(
            business_id=business_id
        ).order_by(Customer.name).all()

    def get_customer(self, id, business_id=None):
        customer = self._get(Customer, id)
        if customer is None or (business_id is not None and customer.business_id != business_id):
            return None
        return customer

    def get_customer_by_email(self, business_id, email):
        return self.session.query(Customer).filter_by(
            business_id=business_id, email=email
        ).order_by(Customer.id).first()

    def get_customer_by_phone(self, business_id, phone):
        return self.session.query(Customer).filter_by(
            business_id=business_id, phone=phone
        ).order_by(Customer.id).first()

    def create_customer(self, business_id, **fields):
        return self._add(Customer(business_id=business_id, **fields))

    # Appointment methods

    def get_appointments(self, business_id, date=None):
        query = self.session.query(Appointment).filter_by(business_id=business_id)
        if date is not None:
            return query.filter_by(date=date).order_by(Appointment.start_time).all()
        return query.order_by(Appointment.created_at.desc(), Appointment.id.desc()).all()

    def get_appointment(self, id, business_id=None):
        appointment = self._get(Appointment, id)
        if appointment is None or (business_id is not None and appointment.business_id != business_id):
            return None
        return appointment

    def get_staff_appointments(self, staff_id, date, include_cancelled=False):
        """Appointments for one staff member on one date, earliest start first"""
        query = self.session.query(Appointment).filter(
            Appointment.staff_id == staff_id,
            Appointment.date == date
        )
        if not include_cancelled:
            query = query.filter(Appointment.status != STATUS_CANCELLED)
        return query.order_by(Appointment.start_time, Appointment.id).all()

    def create_appointment(self, business_id, **fields):
        return self._add(Appointment(business_id=business_id, **fields))

    def update_appointment(self, appointment, changes):
        self._apply(appointment, changes)
        self.session.flush()
        return appointment

    def delete_appointment(self, appointment):
        self.session.delete(appointment)
        self.session.flush()


storage = Storage()
