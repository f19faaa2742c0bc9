from decimal import Decimal

import pytest

from apps.expenses.models import Expense, ExpenseSplit

pytestmark = pytest.mark.django_db


def _create(api_client, group, paid_by, amount, split_type='equal', split_between=None, **extra):
    payload = {
        'groupId': str(group.id),
        'description': extra.pop('description', 'Dinner'),
        'amount': amount,
        'paidBy': str(paid_by.id),
        'splitType': split_type,
        **extra,
    }
    if split_between is not None:
        payload['splitBetween'] = [
            {'memberId': str(member.id), 'amount': value} for member, value in split_between
        ]
    return api_client.post('/api/v1/expenses/', payload, format='json')


def _split_map(expense_data):
    return {s['memberId']: Decimal(s['amount']) for s in expense_data['splitBetween']}


def _balances(api_client, group):
    response = api_client.get(f'/api/v1/groups/{group.id}/balances/')
    assert response.status_code == 200
    return {b['memberId']: Decimal(b['balance']) for b in response.json()['data']}


class TestCreateExpense:
    def test_equal_split_defaults_to_whole_group(self, api_client, trio):
        group, alice, bob, carol = trio
        response = _create(api_client, group, alice, '90.00')

        assert response.status_code == 201
        data = response.json()['data']
        assert data['paidBy'] == str(alice.id)
        assert data['paidByName'] == 'Alice'
        assert data['currency'] == 'USD'
        assert data['category'] == 'other'
        assert _split_map(data) == {
            str(alice.id): Decimal('30'),
            str(bob.id): Decimal('30'),
            str(carol.id): Decimal('30'),
        }

    def test_equal_split_among_some_members(self, api_client, trio):
        group, alice, bob, carol = trio
        response = _create(api_client, group, bob, '10.00', split_between=[(alice, None), (bob, None)])
        assert response.status_code == 201
        assert _split_map(response.json()['data']) == {
            str(alice.id): Decimal('5'),
            str(bob.id): Decimal('5'),
        }

    def test_percentage_split(self, api_client, trio):
        group, alice, bob, carol = trio
        response = _create(
            api_client, group, alice, '100.00', 'percentage',
            split_between=[(alice, '60'), (bob, '40')],
            category='food', currency='EUR', date='2026-03-14',
        )
        assert response.status_code == 201
        data = response.json()['data']
        assert data['category'] == 'food'
        assert data['currency'] == 'EUR'
        assert data['date'] == '2026-03-14'
        assert _split_map(data) == {str(alice.id): Decimal('60'), str(bob.id): Decimal('40')}

    def test_exact_split(self, api_client, trio):
        group, alice, bob, carol = trio
        response = _create(
            api_client, group, carol, '45.00', 'exact',
            split_between=[(alice, '20.00'), (carol, '25.00')],
        )
        assert response.status_code == 201
        assert _split_map(response.json()['data']) == {
            str(alice.id): Decimal('20'),
            str(carol.id): Decimal('25'),
        }

    def test_invalid_percentages_rejected_without_side_effects(self, api_client, trio):
        group, alice, bob, carol = trio
        response = _create(
            api_client, group, alice, '100.00', 'percentage',
            split_between=[(alice, '50'), (bob, '40')],
        )
        assert response.status_code == 400
        assert response.json()['error'] == {
            'code': 'invalid_split',
            'message': 'Percentages must sum to 100.',
        }
        assert Expense.objects.count() == 0
        assert ExpenseSplit.objects.count() == 0

    def test_exact_amounts_must_match_total(self, api_client, trio):
        group, alice, bob, carol = trio
        response = _create(
            api_client, group, alice, '100.00', 'exact',
            split_between=[(alice, '50'), (bob, '40')],
        )
        assert response.status_code == 400
        assert response.json()['error']['code'] == 'invalid_split'

    def test_exact_amounts_below_cent_precision_rejected(self, api_client, trio):
        group, alice, bob, carol = trio
        response = _create(
            api_client, group, alice, '100.00', 'exact',
            split_between=[(alice, '33.335'), (bob, '33.335'), (carol, '33.33')],
        )
        assert response.status_code == 400
        assert response.json()['error'] == {
            'code': 'invalid_split',
            'message': 'Split amounts must have at most 2 decimal places.',
        }
        assert Expense.objects.count() == 0
        assert ExpenseSplit.objects.count() == 0
        assert sum(_balances(api_client, group).values()) == 0

    def test_percentage_requires_details(self, api_client, trio):
        group, alice, bob, carol = trio
        response = _create(api_client, group, alice, '100.00', 'percentage')
        assert response.status_code == 400
        assert response.json()['error']['code'] == 'invalid_split'

    def test_unknown_split_type(self, api_client, trio):
        group, alice, bob, carol = trio
        response = _create(api_client, group, alice, '100.00', 'shares')
        assert response.status_code == 400
        assert response.json()['error']['message'] == 'Invalid split type.'

    def test_equal_split_on_empty_group(self, api_client, make_group, make_member):
        group = make_group()
        outsider = make_member('Olive')
        response = _create(api_client, group, outsider, '10.00')
        assert response.status_code == 400

    def test_payer_must_belong_to_group(self, api_client, trio, make_member):
        group, alice, bob, carol = trio
        outsider = make_member('Olive')
        response = _create(api_client, group, outsider, '10.00')
        assert response.status_code == 400
        assert 'paidBy' in response.json()['error']['details']

    def test_split_member_must_belong_to_group(self, api_client, trio, make_member):
        group, alice, bob, carol = trio
        outsider = make_member('Olive')
        response = _create(api_client, group, alice, '10.00', split_between=[(alice, None), (outsider, None)])
        assert response.status_code == 400
        assert 'splitBetween' in response.json()['error']['details']
        assert Expense.objects.count() == 0

    def test_unknown_group(self, api_client, trio):
        group, alice, bob, carol = trio
        response = api_client.post(
            '/api/v1/expenses/',
            {
                'groupId': '00000000-0000-0000-0000-000000000000',
                'description': 'Ghost',
                'amount': '10.00',
                'paidBy': str(alice.id),
                'splitType': 'equal',
            },
            format='json',
        )
        assert response.status_code == 404
        assert response.json()['error']['message'] == 'Group not found.'

    def test_unknown_payer(self, api_client, trio):
        group, alice, bob, carol = trio
        response = api_client.post(
            '/api/v1/expenses/',
            {
                'groupId': str(group.id),
                'description': 'Ghost',
                'amount': '10.00',
                'paidBy': '00000000-0000-0000-0000-000000000000',
                'splitType': 'equal',
            },
            format='json',
        )
        assert response.status_code == 404
        assert response.json()['error']['message'] == 'Payer member not found.'

    def test_amount_must_be_positive(self, api_client, trio):
        group, alice, bob, carol = trio
        response = _create(api_client, group, alice, '0.00')
        assert response.status_code == 400
        assert 'amount' in response.json()['error']['details']


class TestUpdateAndDeleteExpense:
    def test_amount_change_recalculates_equal_split(self, api_client, trio):
        group, alice, bob, carol = trio
        expense_id = _create(api_client, group, alice, '90.00').json()['data']['id']

        response = api_client.patch(f'/api/v1/expenses/{expense_id}/', {'amount': '120.00'}, format='json')

        assert response.status_code == 200
        data = response.json()['data']
        assert Decimal(data['amount']) == Decimal('120')
        assert set(_split_map(data).values()) == {Decimal('40')}

    def test_switch_to_exact_split(self, api_client, trio):
        group, alice, bob, carol = trio
        expense_id = _create(api_client, group, alice, '90.00').json()['data']['id']

        response = api_client.patch(
            f'/api/v1/expenses/{expense_id}/',
            {
                'splitType': 'exact',
                'splitBetween': [
                    {'memberId': str(alice.id), 'amount': '10.00'},
                    {'memberId': str(bob.id), 'amount': '80.00'},
                ],
            },
            format='json',
        )

        assert response.status_code == 200
        data = response.json()['data']
        assert data['splitType'] == 'exact'
        assert _split_map(data) == {str(alice.id): Decimal('10'), str(bob.id): Decimal('80')}
        assert ExpenseSplit.objects.count() == 2

    def test_description_change_keeps_split(self, api_client, trio):
        group, alice, bob, carol = trio
        created = _create(
            api_client, group, alice, '100.00', 'percentage',
            split_between=[(alice, '60'), (bob, '40')],
        ).json()['data']

        response = api_client.patch(
            f'/api/v1/expenses/{created["id"]}/',
            {'description': 'Team lunch'},
            format='json',
        )

        assert response.status_code == 200
        assert response.json()['data']['description'] == 'Team lunch'
        assert _split_map(response.json()['data']) == _split_map(created)

    def test_invalid_update_leaves_expense_untouched(self, api_client, trio):
        group, alice, bob, carol = trio
        created = _create(api_client, group, alice, '90.00').json()['data']

        response = api_client.patch(
            f'/api/v1/expenses/{created["id"]}/',
            {'amount': '50.00', 'splitType': 'percentage'},
            format='json',
        )

        assert response.status_code == 400
        expense = Expense.objects.get(pk=created['id'])
        assert expense.amount == Decimal('90.00')
        assert expense.split_type == 'equal'
        assert expense.splits.count() == 3

    def test_new_payer_must_belong_to_group(self, api_client, trio, make_member):
        group, alice, bob, carol = trio
        outsider = make_member('Olive')
        expense_id = _create(api_client, group, alice, '90.00').json()['data']['id']

        response = api_client.patch(
            f'/api/v1/expenses/{expense_id}/',
            {'paidBy': str(outsider.id)},
            format='json',
        )
        assert response.status_code == 400

    def test_delete_expense(self, api_client, trio):
        group, alice, bob, carol = trio
        expense_id = _create(api_client, group, alice, '90.00').json()['data']['id']

        response = api_client.delete(f'/api/v1/expenses/{expense_id}/')

        assert response.status_code == 200
        assert Expense.objects.count() == 0
        assert ExpenseSplit.objects.count() == 0
        assert set(_balances(api_client, group).values()) == {Decimal('0')}


class TestListAndSummary:
    def test_filter_by_group_and_category(self, api_client, trio, make_group):
        group, alice, bob, carol = trio
        other = make_group('Other', members=[alice, bob])
        _create(api_client, group, alice, '30.00', category='food', description='Tapas')
        _create(api_client, group, bob, '12.00', category='travel', description='Taxi')
        _create(api_client, other, alice, '8.00', category='food', description='Coffee')

        by_group = api_client.get('/api/v1/expenses/', {'group': str(group.id)}).json()['data']
        assert {e['description'] for e in by_group} == {'Tapas', 'Taxi'}

        food = api_client.get(
            '/api/v1/expenses/', {'group': str(group.id), 'category': 'food'}
        ).json()['data']
        assert [e['description'] for e in food] == ['Tapas']

        by_payer = api_client.get('/api/v1/expenses/', {'paidBy': str(alice.id)}).json()['data']
        assert {e['description'] for e in by_payer} == {'Tapas', 'Coffee'}

    def test_summary(self, api_client, trio):
        group, alice, bob, carol = trio
        _create(api_client, group, alice, '30.00', category='food')
        _create(api_client, group, alice, '15.00', category='food')
        _create(api_client, group, bob, '12.00', category='travel')

        response = api_client.get('/api/v1/expenses/summary/', {'group': str(group.id)})

        assert response.status_code == 200
        data = response.json()['data']
        assert Decimal(data['totalExpenses']) == Decimal('57')
        assert data['expenseCount'] == 3
        categories = {row['category']: Decimal(row['total']) for row in data['categoryBreakdown']}
        assert categories == {'food': Decimal('45'), 'travel': Decimal('12')}
        spending = {row['memberName']: Decimal(row['totalPaid']) for row in data['memberSpending']}
        assert spending == {'Alice': Decimal('45'), 'Bob': Decimal('12')}

    def test_summary_requires_group(self, api_client):
        response = api_client.get('/api/v1/expenses/summary/')
        assert response.status_code == 400

    def test_summary_unknown_group(self, api_client):
        response = api_client.get('/api/v1/expenses/summary/', {'group': 'nope'})
        assert response.status_code == 404


class TestBalancesAndSettlements:
    def test_equal_split_scenario(self, api_client, trio):
        group, alice, bob, carol = trio
        _create(api_client, group, alice, '90.00')

        assert _balances(api_client, group) == {
            str(alice.id): Decimal('60'),
            str(bob.id): Decimal('-30'),
            str(carol.id): Decimal('-30'),
        }

        response = api_client.get(f'/api/v1/groups/{group.id}/settlements/')
        assert response.status_code == 200
        settlements = response.json()['data']
        assert len(settlements) == 2
        assert {s['to'] for s in settlements} == {str(alice.id)}
        assert {s['toName'] for s in settlements} == {'Alice'}
        assert {s['from'] for s in settlements} == {str(bob.id), str(carol.id)}
        assert sum(Decimal(s['amount']) for s in settlements) == Decimal('60')

    def test_balance_payload_shape(self, api_client, trio):
        group, alice, bob, carol = trio
        _create(api_client, group, alice, '90.00')

        payload = api_client.get(f'/api/v1/groups/{group.id}/balances/').json()['data']
        entry = next(b for b in payload if b['memberId'] == str(alice.id))
        assert entry == {'memberId': str(alice.id), 'memberName': 'Alice', 'balance': '60.00'}

    def test_percentage_scenario(self, api_client, trio):
        group, alice, bob, carol = trio
        _create(
            api_client, group, alice, '100.00', 'percentage',
            split_between=[(alice, '60'), (bob, '40')],
        )
        balances = _balances(api_client, group)
        assert balances[str(alice.id)] == Decimal('40')
        assert balances[str(bob.id)] == Decimal('-40')
        assert balances[str(carol.id)] == Decimal('0')

    def test_multi_expense_netting(self, api_client, trio):
        group, alice, bob, carol = trio
        _create(api_client, group, alice, '50.00', split_between=[(alice, None), (bob, None)])
        _create(api_client, group, bob, '60.00', split_between=[(alice, None), (bob, None)])

        balances = _balances(api_client, group)
        assert balances[str(alice.id)] == Decimal('-5')
        assert balances[str(bob.id)] == Decimal('5')

        settlements = api_client.get(f'/api/v1/groups/{group.id}/settlements/').json()['data']
        assert settlements == [{
            'from': str(alice.id),
            'fromName': 'Alice',
            'to': str(bob.id),
            'toName': 'Bob',
            'amount': '5.00',
        }]

    def test_no_expenses(self, api_client, trio):
        group, alice, bob, carol = trio
        balances = _balances(api_client, group)
        assert len(balances) == 3
        assert set(balances.values()) == {Decimal('0')}

        response = api_client.get(f'/api/v1/groups/{group.id}/settlements/')
        assert response.json() == {'success': True, 'data': []}

    def test_settlements_zero_all_balances(self, api_client, trio):
        group, alice, bob, carol = trio
        _create(api_client, group, alice, '100.00')
        _create(api_client, group, bob, '45.50', 'exact', split_between=[(alice, '20.50'), (carol, '25.00')])
        _create(api_client, group, carol, '80.00', 'percentage', split_between=[(alice, '25'), (bob, '75')])

        balances = _balances(api_client, group)
        assert abs(sum(balances.values())) <= Decimal('0.01')

        settlements = api_client.get(f'/api/v1/groups/{group.id}/settlements/').json()['data']
        for s in settlements:
            balances[s['from']] += Decimal(s['amount'])
            balances[s['to']] -= Decimal(s['amount'])
        assert all(abs(v) <= Decimal('0.01') for v in balances.values())

    def test_repeated_requests_are_identical(self, api_client, trio):
        group, alice, bob, carol = trio
        _create(api_client, group, carol, '33.00')

        for path in ('balances', 'settlements'):
            first = api_client.get(f'/api/v1/groups/{group.id}/{path}/').json()
            second = api_client.get(f'/api/v1/groups/{group.id}/{path}/').json()
            assert first == second

    def test_unknown_group(self, api_client):
        for path in ('balances', 'settlements'):
            response = api_client.get(f'/api/v1/groups/00000000-0000-0000-0000-000000000000/{path}/')
            assert response.status_code == 404
            assert response.json()['error']['message'] == 'Group not found.'


def test_health_check(api_client):
    assert api_client.get('/api/v1/health/').json() == {'status': 'ok', 'service': 'group-ledger-api'}
