from datetime import timedelta

import pytest

from roadblock.images import full_image_url, image_links, thumbnail_url
from roadblock.utils import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    parse_redirect_url,
    verify_password,
)


@pytest.mark.parametrize('url', ['//evil.com', 'http://evil.com', 'https://evil.com/vehicles', '', None, 'vehicles', '/\\evil.com', '/admin'])
def test_parse_redirect_url_falls_back(url):
    assert parse_redirect_url(url) == '/'


@pytest.mark.parametrize('url', ['/', '/vehicles', '/vehicles/3', '/vehicles/3/edit', '/drivers/1', '/account'])
def test_parse_redirect_url_keeps_internal_paths(url):
    assert parse_redirect_url(url) == url


def test_password_hash_round_trip():
    hashed = get_password_hash('abcd')
    assert hashed != 'abcd'
    assert hashed.startswith('$2b$10$')
    assert verify_password('abcd', hashed)
    assert not verify_password('abce', hashed)


def test_access_token_round_trip():
    token = create_access_token({'sub': '5'}, 'secret', 'HS256', timedelta(minutes=5))
    assert decode_access_token(token, 'secret', 'HS256')['sub'] == '5'


def test_access_token_rejects_wrong_secret_and_expiry():
    token = create_access_token({'sub': '5'}, 'secret', 'HS256', timedelta(minutes=5))
    assert decode_access_token(token, 'other-secret', 'HS256') == {}

    expired = create_access_token({'sub': '5'}, 'secret', 'HS256', timedelta(seconds=-1))
    assert decode_access_token(expired, 'secret', 'HS256') == {}

    assert decode_access_token('not-a-token', 'secret', 'HS256') == {}


def test_image_urls():
    assert thumbnail_url('demo', 'vehicles/a') == (
        'https://res.cloudinary.com/demo/image/upload/c_thumb,h_250,w_250/f_auto,q_auto/vehicles/a'
    )
    assert full_image_url('demo', 'vehicles/a') == 'https://res.cloudinary.com/demo/image/upload/f_auto,q_auto/vehicles/a'
    assert thumbnail_url('demo', '') is None
    assert thumbnail_url('', 'vehicles/a') is None


def test_image_links():
    links = image_links('demo', 'drivers/b')
    assert links.upload_thumbnail.endswith('/c_thumb,h_80,w_80/r_5/f_auto,q_auto/drivers/b')
    assert image_links('demo', '').full is None
