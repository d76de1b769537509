import pytest
from fastapi.testclient import TestClient

from roadblock.config import Settings
from roadblock.credentials import CredentialStore
from roadblock.main import create_app

USERNAME = 'inspector'
PASSWORD = 'secret-pass'

VEHICLE_FORM = {
    'plate_number': 'PBS492',
    'make_and_model': 'Land Rover, Defender',
    'fines_due': '100',
    'vehicle_image': 'vehicles/pbs492',
    'year': '2018',
    'colour': 'White',
    'weight': '2000',
    'net_weight': '1500',
    'full_name': 'John Moyo',
    'license_number': '472629HD',
    'driver_image': 'drivers/john',
    'national_id': '70-278724-G87',
    'dob': '1998-04-14',
    'phone': '+263779528194',
    'defensive': '',
    'medical': '',
    'licence_class': '2',
    'licence_year': '2018',
}


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        SECRET_KEY='test-secret',
        CLOUDINARY_CLOUD_NAME='demo-cloud',
        CLOUDINARY_UPLOAD_PRESET='rte',
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def user(db):
    return CredentialStore(db).create(USERNAME, PASSWORD)


@pytest.fixture
def auth_client(client, user):
    response = client.post('/login', data={'username': USERNAME, 'password': PASSWORD}, follow_redirects=False)
    assert response.status_code == 303
    return client


@pytest.fixture
def make_vehicle(auth_client):
    def make(**overrides):
        response = auth_client.post('/vehicles/new', data={**VEHICLE_FORM, **overrides}, follow_redirects=False)
        assert response.status_code == 303, response.text
        return int(response.headers['location'].rsplit('/', 1)[1])

    return make
