import itertools

import pytest
from django.contrib.auth.models import User
from rest_framework.test import APIClient

from apps.accounts.models import FamilyMember

_emails = itertools.count(1)


@pytest.fixture
def make_user(db):
    def _make(email=None, **kwargs):
        email = email or f'user{next(_emails)}@example.com'
        return User.objects.create_user(username=email, email=email, password='testpass123', **kwargs)
    return _make


@pytest.fixture
def add_member(db):
    def _add(creator, member, role=FamilyMember.ROLE_MEMBER, status=FamilyMember.STATUS_ACTIVE):
        return FamilyMember.objects.create(creator=creator, member=member, role=role, status=status)
    return _add


@pytest.fixture
def creator(make_user):
    return make_user('ada@example.com', first_name='Ada', last_name='Lovelace')


@pytest.fixture
def representative(make_user, add_member, creator):
    user = make_user('rep@example.com', first_name='Rita')
    add_member(creator, user, role=FamilyMember.ROLE_REPRESENTATIVE)
    return user


@pytest.fixture
def member(make_user, add_member, creator):
    user = make_user('member@example.com', first_name='Max')
    add_member(creator, user)
    return user


@pytest.fixture
def stranger(make_user):
    return make_user('stranger@example.com')


@pytest.fixture
def api_client():
    return APIClient()
