"""CRUD, validation and ownership isolation for every resource router."""
from tests.base import BaseTestCase

SAMPLES = {
    'accounts': {'name': 'Main', 'type': 'bank', 'balance': 1000, 'currency': 'AED'},
    'transactions': {'type': 'expense', 'amount': 42.5, 'description': 'Groceries', 'category': 'Food & Dining'},
    'budgets': {'category': 'Food & Dining', 'budget_amount': 500},
    'notes': {'title': 'Save more', 'content': 'Cook at home', 'type': 'goal'},
    'pending': {'type': 'income', 'amount': 2000, 'description': 'Salary'},
}


class ResourceCrudTests(BaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.headers = self.register_headers()

    def test_create_list_update_delete_each_resource(self):
        for resource, sample in SAMPLES.items():
            with self.subTest(resource=resource):
                record = self.create(resource, self.headers, **sample)
                self.assertEqual(len(record['id']), 32)
                self.assertTrue(record['created_at'])
                self.assertEqual([r['id'] for r in self.list(resource, self.headers)], [record['id']])

                resp = self.client.delete(f'/api/{resource}/{record["id"]}', headers=self.headers)
                self.assertEqual(resp.get_json(), {'success': True})
                self.assertEqual(self.list(resource, self.headers), [])

    def test_defaults_are_applied(self):
        tx = self.create('transactions', self.headers, type='Expense', amount='12', description='Taxi')
        self.assertEqual(tx['type'], 'expense')
        self.assertEqual(tx['amount'], 12.0)
        self.assertEqual(tx['currency'], 'AED')
        self.assertEqual(tx['category'], 'Other')
        self.assertEqual(tx['tags'], [])
        self.assertIsNone(tx['account_id'])
        self.assertTrue(tx['date'])

        budget = self.create('budgets', self.headers, category='Transportation', budget_amount=0)
        self.assertEqual(budget['period'], 'monthly')
        self.assertEqual(budget['spent_amount'], 0)

        note = self.create('notes', self.headers, title='Tip', content='Track everything')
        self.assertEqual((note['type'], note['priority']), ('tip', 'medium'))

    def test_dates_are_normalized(self):
        tx = self.create('transactions', self.headers, type='income', amount=5, description='Gift', date='15/01/2024')
        self.assertEqual(tx['date'], '2024-01-15T00:00:00')

    def test_tags_are_deduplicated(self):
        note = self.create('notes', self.headers, title='T', content='C', tags=['a', ' b', 'a', ''])
        self.assertEqual(note['tags'], ['a', 'b'])

    def test_update_merges_with_existing_record(self):
        tx = self.create('transactions', self.headers, **SAMPLES['transactions'])
        resp = self.client.put(
            f'/api/transactions/{tx["id"]}',
            json={'amount': 30, 'user_id': 'someone-else', 'id': 'other-id'},
            headers=self.headers
        )
        self.assertEqual(resp.status_code, 200)
        updated = resp.get_json()
        self.assertEqual(updated['id'], tx['id'])
        self.assertEqual(updated['user_id'], tx['user_id'])
        self.assertEqual(updated['amount'], 30)
        self.assertEqual(updated['description'], 'Groceries')

    def test_update_is_validated(self):
        budget = self.create('budgets', self.headers, **SAMPLES['budgets'])
        resp = self.client.put(f'/api/budgets/{budget["id"]}', json={'budget_amount': -5}, headers=self.headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()['errors'][0]['field'], 'budget_amount')
        self.assertEqual(self.list('budgets', self.headers)[0]['budget_amount'], 500)

    def test_unknown_record(self):
        resp = self.client.put('/api/notes/missing', json={'title': 'x'}, headers=self.headers)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.get_json(), {'error': 'Not found'})
        self.assertEqual(self.client.delete('/api/notes/missing', headers=self.headers).status_code, 404)


class TransactionValidationTests(BaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.headers = self.register_headers()

    def assert_rejected(self, body, field):
        resp = self.client.post('/api/transactions', json=body, headers=self.headers)
        self.assertEqual(resp.status_code, 400)
        self.assertIn(field, [e['field'] for e in resp.get_json()['errors']])
        self.assertEqual(self.list('transactions', self.headers), [])

    def test_non_numeric_amount(self):
        self.assert_rejected({'type': 'expense', 'amount': 'lots', 'description': 'x'}, 'amount')

    def test_non_positive_amount(self):
        self.assert_rejected({'type': 'expense', 'amount': 0, 'description': 'x'}, 'amount')
        self.assert_rejected({'type': 'expense', 'amount': True, 'description': 'x'}, 'amount')

    def test_missing_description(self):
        self.assert_rejected({'type': 'expense', 'amount': 10}, 'description')
        self.assert_rejected({'type': 'expense', 'amount': 10, 'description': '   '}, 'description')

    def test_bad_type_currency_and_date(self):
        self.assert_rejected({'type': 'transfer', 'amount': 10, 'description': 'x'}, 'type')
        self.assert_rejected({'type': 'income', 'amount': 10, 'description': 'x', 'currency': 'dirham'}, 'currency')
        self.assert_rejected({'type': 'income', 'amount': 10, 'description': 'x', 'date': 'yesterday'}, 'date')

    def test_tags_must_be_strings(self):
        self.assert_rejected({'type': 'income', 'amount': 10, 'description': 'x', 'tags': 'one'}, 'tags')

    def test_account_must_exist(self):
        self.assert_rejected({'type': 'income', 'amount': 10, 'description': 'x', 'account_id': 'nope'}, 'account_id')

    def test_amount_too_large_for_float(self):
        body = '{"type": "expense", "description": "x", "amount": 1' + '0' * 400 + '}'
        resp = self.client.post('/api/transactions', data=body, content_type='application/json',
                                headers=self.headers)
        self.assertEqual(resp.status_code, 400)
        self.assertIn('amount', [e['field'] for e in resp.get_json()['errors']])
        self.assertEqual(self.list('transactions', self.headers), [])

    def test_overlong_text_is_rejected_not_truncated(self):
        self.assert_rejected({'type': 'income', 'amount': 10, 'description': 'x' * 1001}, 'description')

        resp = self.client.post('/api/notes', json={'title': 't' * 201, 'content': 'c'}, headers=self.headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()['errors'], [
            {'field': 'title', 'msg': 'title must be at most 200 characters'}
        ])

        note = self.create('notes', self.headers, title='t' * 200, content='c')
        self.assertEqual(len(note['title']), 200)


class OwnershipTests(BaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.alice = self.register_headers('alice@example.com')
        self.bob = self.register_headers('bob@example.com')

    def test_records_are_invisible_to_other_users(self):
        for resource, sample in SAMPLES.items():
            with self.subTest(resource=resource):
                record = self.create(resource, self.alice, **sample)
                self.assertEqual(self.list(resource, self.bob), [])

                resp = self.client.put(f'/api/{resource}/{record["id"]}', json=sample, headers=self.bob)
                self.assertEqual(resp.status_code, 404)
                resp = self.client.delete(f'/api/{resource}/{record["id"]}', headers=self.bob)
                self.assertEqual(resp.status_code, 404)

                self.assertEqual(len(self.list(resource, self.alice)), 1)

    def test_cannot_attach_transaction_to_foreign_account(self):
        account = self.create('accounts', self.alice, **SAMPLES['accounts'])
        resp = self.client.post('/api/transactions', headers=self.bob, json={
            'type': 'expense', 'amount': 10, 'description': 'x', 'account_id': account['id']
        })
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()['errors'][0], {'field': 'account_id', 'msg': 'Account not found'})

    def test_cannot_approve_foreign_pending(self):
        item = self.create('pending', self.alice, **SAMPLES['pending'])
        resp = self.client.post(f'/api/pending/{item["id"]}/approve', headers=self.bob)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(len(self.list('pending', self.alice)), 1)
