"""Registration, login, token verification and profile routes."""
import io
from datetime import timedelta

from flask_jwt_extended import create_access_token

from finance_backend.errors import InvalidToken
from finance_backend.tokens import issue_token, verify_token
from tests.base import TEST_SECRET, BaseTestCase


class RegisterLoginTests(BaseTestCase):
    def test_register_returns_token_and_public_user(self):
        data = self.register()
        self.assertTrue(data['token'])
        user = data['user']
        self.assertEqual(user['email'], 'alice@example.com')
        self.assertEqual(user['currency'], 'AED')
        self.assertIsNone(user['photo_url'])
        self.assertNotIn('password_hash', user)

        resp = self.client.get('/api/auth/profile', headers=self.auth_headers(data['token']))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()['id'], user['id'])

    def test_register_existing_email_fails(self):
        self.register()
        resp = self.client.post('/api/auth/register', json={
            'name': 'Other', 'email': 'ALICE@example.com', 'password': 'another1'
        })
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json(), {'error': 'User already exists'})

    def test_register_validation_lists_every_field(self):
        resp = self.client.post('/api/auth/register', json={'email': 'nope', 'password': '123'})
        self.assertEqual(resp.status_code, 400)
        fields = {e['field'] for e in resp.get_json()['errors']}
        self.assertEqual(fields, {'name', 'email', 'password'})

    def test_register_rejects_non_object_body(self):
        resp = self.client.post('/api/auth/register', data='not json', content_type='application/json')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()['errors'][0]['field'], 'body')

    def test_login(self):
        self.register()
        resp = self.client.post('/api/auth/login', json={'email': 'alice@example.com', 'password': 'secret123'})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()['user']['name'], 'Alice')

    def test_login_with_wrong_password_or_unknown_email(self):
        self.register()
        for body in ({'email': 'alice@example.com', 'password': 'wrong-one'},
                     {'email': 'bob@example.com', 'password': 'secret123'}):
            resp = self.client.post('/api/auth/login', json=body)
            self.assertEqual(resp.status_code, 400)
            self.assertEqual(resp.get_json(), {'error': 'Invalid credentials'})


class TokenTests(BaseTestCase):
    def test_missing_token(self):
        resp = self.client.get('/api/transactions')
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.get_json(), {'error': 'No token, authorization denied'})

    def test_malformed_token(self):
        resp = self.client.get('/api/transactions', headers=self.auth_headers('not-a-jwt'))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.get_json(), {'error': 'Token is not valid'})

    def test_expired_token(self):
        user_id = self.register()['user']['id']
        with self.app.app_context():
            token = create_access_token(identity=user_id, expires_delta=timedelta(seconds=-30))

        resp = self.client.get('/api/accounts', headers=self.auth_headers(token))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.get_json(), {'error': 'Token is not valid'})

    def test_token_for_unknown_user(self):
        with self.app.app_context():
            token = issue_token('no-such-user')

        resp = self.client.get('/api/accounts', headers=self.auth_headers(token))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.get_json(), {'error': 'Token is not valid'})

    def test_verify_token(self):
        user_id = self.register()['user']['id']
        with self.app.app_context():
            self.assertEqual(verify_token(issue_token(user_id)), user_id)
            with self.assertRaises(InvalidToken):
                verify_token(issue_token('ghost'))
            with self.assertRaises(InvalidToken):
                verify_token('garbage')
            expired = create_access_token(identity=user_id, expires_delta=timedelta(seconds=-30))
            with self.assertRaises(InvalidToken):
                verify_token(expired)

    def test_token_signed_with_other_secret(self):
        user_id = self.register()['user']['id']
        self.app.config['JWT_SECRET_KEY'] = 'a-completely-different-secret-key-value'
        with self.app.app_context():
            forged = issue_token(user_id)
        self.app.config['JWT_SECRET_KEY'] = TEST_SECRET

        resp = self.client.get('/api/accounts', headers=self.auth_headers(forged))
        self.assertEqual(resp.status_code, 401)

    def test_public_endpoints_need_no_token(self):
        self.assertEqual(self.client.get('/health').get_json(), {'status': 'ok'})
        categories = self.client.get('/api/categories').get_json()['categories']
        self.assertIn('Other', categories)
        codes = [c['code'] for c in self.client.get('/api/currencies').get_json()['currencies']]
        self.assertEqual(codes[0], 'AED')


class ProfileTests(BaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.headers = self.register_headers()

    def test_update_profile_merges_fields(self):
        resp = self.client.put('/api/auth/profile', json={'currency': 'usd'}, headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        user = resp.get_json()
        self.assertEqual(user['currency'], 'USD')
        self.assertEqual(user['name'], 'Alice')

    def test_update_profile_to_taken_email(self):
        self.register(email='bob@example.com', name='Bob')
        resp = self.client.put('/api/auth/profile', json={'email': 'bob@example.com'}, headers=self.headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json(), {'error': 'User already exists'})

    def test_change_password(self):
        resp = self.client.post('/api/auth/change-password', headers=self.headers, json={
            'current_password': 'wrong-one', 'new_password': 'brandnew1'
        })
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json(), {'error': 'Current password is incorrect'})

        resp = self.client.post('/api/auth/change-password', headers=self.headers, json={
            'current_password': 'secret123', 'new_password': 'brandnew1'
        })
        self.assertEqual(resp.get_json(), {'success': True})

        old = self.client.post('/api/auth/login', json={'email': 'alice@example.com', 'password': 'secret123'})
        self.assertEqual(old.status_code, 400)
        new = self.client.post('/api/auth/login', json={'email': 'alice@example.com', 'password': 'brandnew1'})
        self.assertEqual(new.status_code, 200)

    def test_profile_photo_upload_and_fetch(self):
        resp = self.client.post(
            '/api/auth/profile-photo',
            data={'photo': (io.BytesIO(b'fake-png-bytes'), 'me.png')},
            content_type='multipart/form-data',
            headers=self.headers
        )
        self.assertEqual(resp.status_code, 200, resp.get_json())
        photo_url = resp.get_json()['photo_url']
        self.assertTrue(photo_url.endswith('.png'))

        photo = self.client.get(photo_url, headers=self.headers)
        self.assertEqual(photo.status_code, 200)
        self.assertEqual(photo.data, b'fake-png-bytes')
        photo.close()

        other = self.register_headers(email='bob@example.com')
        self.assertEqual(self.client.get(photo_url, headers=other).status_code, 404)

    def test_profile_photo_rejects_other_types(self):
        resp = self.client.post(
            '/api/auth/profile-photo',
            data={'photo': (io.BytesIO(b'#!/bin/sh'), 'script.sh')},
            content_type='multipart/form-data',
            headers=self.headers
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()['errors'][0]['field'], 'photo')
