import os
from datetime import datetime, timedelta, timezone

import pytest
from flask_jwt_extended import create_access_token

from nextdoor import create_app
from nextdoor.commands.seed_commands import seed_postal_sectors
from nextdoor.extensions import db
from nextdoor.models import Community, GroupBuy, Post, User, UserProfile
from nextdoor.models.enumerations import GroupBuyStatus, PostTag


@pytest.fixture(scope='function')
def app():
    """Create application for testing with a fresh in-memory database."""
    os.environ['FLASK_ENV'] = 'testing'

    app = create_app('testing')

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def runner(app):
    """Create test CLI runner."""
    return app.test_cli_runner()


@pytest.fixture(scope='function')
def sectors(app):
    seed_postal_sectors()


@pytest.fixture(scope='function')
def create_user(app):
    """Create a test user, optionally with a display name."""
    def _create_user(email='test@example.com', password='test123', display_name=None):
        user = User(email=email, email_confirmed=True)
        user.set_password(password)
        db.session.add(user)
        db.session.flush()
        if display_name:
            db.session.add(UserProfile(user_id=user.id, display_name=display_name))
        db.session.commit()
        return user
    return _create_user


@pytest.fixture(scope='function')
def auth_headers(app):
    """Bearer headers for a user."""
    def _auth_headers(user):
        token = create_access_token(identity=str(user.id))
        return {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {token}'
        }
    return _auth_headers


@pytest.fixture(scope='function')
def community(app, sectors):
    row = Community(
        slug='ang-mo-kio-avenue-3-blk-400409',
        name='Ang Mo Kio Avenue 3 Blk 400–409',
        area='Bishan',
        region='Central',
        sector_code='56',
    )
    db.session.add(row)
    db.session.commit()
    return row


@pytest.fixture(scope='function')
def create_post(app):
    def _create_post(community, user, title='Hello', body='First post', tag=PostTag.GENERAL):
        post = Post(community_id=community.id, user_id=user.id, author=user.display_name or 'User',
                    title=title, body=body, tag=tag)
        db.session.add(post)
        db.session.commit()
        return post
    return _create_post


@pytest.fixture(scope='function')
def create_group_buy(app):
    def _create_group_buy(community, organizer, **overrides):
        attrs = dict(
            community_id=community.id,
            organizer_id=organizer.id,
            title='Bulk rice',
            description='10kg jasmine rice',
            category='groceries',
            target_quantity=3,
            price_individual=20.0,
            price_group=15.0,
            deadline=datetime.now(timezone.utc).date() + timedelta(days=7),
            pickup_location='Blk 406 void deck',
            status=GroupBuyStatus.PENDING,
        )
        attrs.update(overrides)
        group_buy = GroupBuy(**attrs)
        db.session.add(group_buy)
        db.session.commit()
        return group_buy
    return _create_group_buy


@pytest.fixture(scope='function')
def sent_mail(monkeypatch):
    """Capture outgoing mail instead of calling the mail API."""
    sent = []

    def _fake_send(email, subject, body):
        sent.append({'email': email, 'subject': subject, 'body': body})
        return 200

    monkeypatch.setattr('nextdoor.utils.services.mail.send_mail', _fake_send)
    return sent
