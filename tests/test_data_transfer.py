"""Per-user JSON export and import."""
import io
import json

from tests.base import BaseTestCase


class DataTransferTests(BaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.alice = self.register_headers('alice@example.com')
        self.account = self.create('accounts', self.alice, name='Main', type='bank', balance=1000, currency='AED')
        self.create('transactions', self.alice, type='expense', amount=250, description='Rent',
                    account_id=self.account['id'], tags=['home'])
        self.create('budgets', self.alice, category='Other', budget_amount=300)
        self.create('notes', self.alice, title='Goal', content='Save 10%', type='goal', priority='high')
        self.create('pending', self.alice, type='income', amount=2000, description='Salary',
                    account_id=self.account['id'])

    def export(self, headers):
        resp = self.client.get('/api/export', headers=headers)
        self.assertEqual(resp.status_code, 200)
        return resp.get_json()

    def test_export_contains_every_collection(self):
        document = self.export(self.alice)
        self.assertEqual(document['user']['email'], 'alice@example.com')
        self.assertTrue(document['exported_at'])
        for name in ('accounts', 'transactions', 'budgets', 'notes', 'pending'):
            self.assertEqual(len(document[name]), 1, name)
        self.assertEqual(document['accounts'][0]['balance'], 750)

    def test_import_into_other_user_remaps_accounts(self):
        document = self.export(self.alice)
        bob = self.register_headers('bob@example.com')

        resp = self.client.post('/api/import', json=document, headers=bob)
        self.assertEqual(resp.status_code, 200, resp.get_json())
        self.assertEqual(resp.get_json()['imported'], {
            'accounts': 1, 'transactions': 1, 'budgets': 1, 'notes': 1, 'pending': 1
        })

        imported = self.export(bob)
        account = imported['accounts'][0]
        self.assertNotEqual(account['id'], self.account['id'])
        # balance taken as exported, not re-applied
        self.assertEqual(account['balance'], 750)

        tx = imported['transactions'][0]
        self.assertEqual(tx['account_id'], account['id'])
        self.assertEqual(tx['tags'], ['home'])
        self.assertEqual(imported['pending'][0]['account_id'], account['id'])
        self.assertEqual(imported['notes'][0]['priority'], 'high')

        # alice is untouched
        self.assertEqual(len(self.list('accounts', self.alice)), 1)

    def test_import_from_uploaded_file(self):
        document = self.export(self.alice)
        resp = self.client.post(
            '/api/import',
            data={'file': (io.BytesIO(json.dumps(document).encode('utf-8')), 'export.json')},
            content_type='multipart/form-data',
            headers=self.alice
        )
        self.assertEqual(resp.status_code, 200, resp.get_json())
        self.assertEqual(len(self.list('transactions', self.alice)), 2)

    def test_invalid_file(self):
        resp = self.client.post(
            '/api/import',
            data={'file': (io.BytesIO(b'{not json'), 'export.json')},
            content_type='multipart/form-data',
            headers=self.alice
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()['errors'][0]['field'], 'file')

    def test_invalid_record_rolls_back_whole_import(self):
        bob = self.register_headers('bob@example.com')
        document = {
            'accounts': [{'id': 'old', 'name': 'Cash', 'type': 'cash', 'currency': 'AED'}],
            'notes': [{'title': 'ok', 'content': 'fine'}, {'title': 'missing content'}],
        }
        resp = self.client.post('/api/import', json=document, headers=bob)
        self.assertEqual(resp.status_code, 400)
        errors = resp.get_json()['errors']
        self.assertEqual(len(errors), 1)
        self.assertEqual((errors[0]['collection'], errors[0]['row']), ('notes', 1))

        self.assertEqual(self.list('accounts', bob), [])
        self.assertEqual(self.list('notes', bob), [])

    def test_unknown_account_reference_is_dropped(self):
        bob = self.register_headers('bob@example.com')
        document = {'transactions': [{'type': 'income', 'amount': 5, 'description': 'x',
                                      'account_id': self.account['id']}]}
        resp = self.client.post('/api/import', json=document, headers=bob)
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(self.list('transactions', bob)[0]['account_id'])
