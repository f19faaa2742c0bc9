import pytest

from apps.expenses.models import Expense, ExpenseSplit
from apps.groups.models import Group
from apps.members.models import Member

pytestmark = pytest.mark.django_db


def test_create_group(api_client):
    response = api_client.post(
        '/api/v1/groups/',
        {'name': 'Flatmates', 'description': 'Bills and groceries'},
        format='json',
    )
    assert response.status_code == 201
    data = response.json()['data']
    assert data['name'] == 'Flatmates'
    assert data['memberIds'] == []
    assert data['memberCount'] == 0


def test_create_group_rejects_blank_name(api_client):
    response = api_client.post('/api/v1/groups/', {'name': '   '}, format='json')
    assert response.status_code == 400


def test_retrieve_includes_members_and_expenses(api_client, trio, make_expense):
    group, alice, bob, carol = trio
    make_expense(group, alice, '20', [(alice, '10'), (bob, '10')], description='Pizza')

    response = api_client.get(f'/api/v1/groups/{group.id}/')

    assert response.status_code == 200
    data = response.json()['data']
    assert {m['name'] for m in data['members']} == {'Alice', 'Bob', 'Carol'}
    assert [e['description'] for e in data['expenses']] == ['Pizza']


def test_retrieve_unknown_group(api_client):
    response = api_client.get('/api/v1/groups/00000000-0000-0000-0000-000000000000/')
    assert response.status_code == 404
    assert response.json()['error'] == {'code': 'not_found', 'message': 'Group not found.'}


def test_update_group(api_client, make_group):
    group = make_group('Old name')
    response = api_client.patch(f'/api/v1/groups/{group.id}/', {'name': 'New name'}, format='json')
    assert response.status_code == 200
    assert response.json()['data']['name'] == 'New name'


def test_delete_group_cascades_expenses_not_members(api_client, trio, make_expense):
    group, alice, bob, carol = trio
    make_expense(group, alice, '20', [(alice, '10'), (bob, '10')])

    response = api_client.delete(f'/api/v1/groups/{group.id}/')

    assert response.status_code == 200
    assert not Group.objects.filter(pk=group.id).exists()
    assert Expense.objects.count() == 0
    assert ExpenseSplit.objects.count() == 0
    assert Member.objects.count() == 3


class TestMembership:
    def test_add_new_member_by_name(self, api_client, make_group):
        group = make_group()
        response = api_client.post(
            f'/api/v1/groups/{group.id}/members/',
            {'name': 'Erin', 'email': 'erin@example.com'},
            format='json',
        )
        assert response.status_code == 201
        data = response.json()['data']
        assert data['member']['name'] == 'Erin'
        assert data['group']['memberIds'] == [data['member']['id']]

    def test_add_existing_member(self, api_client, make_group, make_member):
        group = make_group()
        member = make_member('Frank')
        response = api_client.post(
            f'/api/v1/groups/{group.id}/members/',
            {'memberId': str(member.id)},
            format='json',
        )
        assert response.status_code == 201
        assert group.has_member(member.id)

    def test_add_member_twice_rejected(self, api_client, trio):
        group, alice, bob, carol = trio
        response = api_client.post(
            f'/api/v1/groups/{group.id}/members/',
            {'memberId': str(alice.id)},
            format='json',
        )
        assert response.status_code == 400
        assert response.json()['error']['code'] == 'already_member'

    def test_add_unknown_member(self, api_client, make_group):
        group = make_group()
        response = api_client.post(
            f'/api/v1/groups/{group.id}/members/',
            {'memberId': '00000000-0000-0000-0000-000000000000'},
            format='json',
        )
        assert response.status_code == 404

    def test_add_requires_id_or_name(self, api_client, make_group):
        group = make_group()
        response = api_client.post(f'/api/v1/groups/{group.id}/members/', {}, format='json')
        assert response.status_code == 400
        assert response.json()['error']['code'] == 'validation_error'

    def test_list_members(self, api_client, trio):
        group, alice, bob, carol = trio
        response = api_client.get(f'/api/v1/groups/{group.id}/members/')
        assert response.status_code == 200
        assert {m['memberId'] for m in response.json()['data']} == {
            str(alice.id), str(bob.id), str(carol.id),
        }

    def test_remove_member(self, api_client, trio):
        group, alice, bob, carol = trio
        response = api_client.delete(f'/api/v1/groups/{group.id}/members/{carol.id}/')
        assert response.status_code == 200
        assert not group.has_member(carol.id)
        assert Member.objects.filter(pk=carol.id).exists()

    def test_remove_non_member(self, api_client, make_group, make_member):
        group = make_group()
        outsider = make_member('Gina')
        response = api_client.delete(f'/api/v1/groups/{group.id}/members/{outsider.id}/')
        assert response.status_code == 400
        assert response.json()['error']['code'] == 'not_member'

    def test_remove_malformed_member_id(self, api_client, make_group):
        group = make_group()
        response = api_client.delete(f'/api/v1/groups/{group.id}/members/abc/')
        assert response.status_code == 400
        assert response.json()['error']['code'] == 'not_member'

    def test_remove_member_with_expenses_refused(self, api_client, trio, make_expense):
        group, alice, bob, carol = trio
        make_expense(group, alice, '20', [(alice, '10'), (bob, '10')])

        for member in (alice, bob):
            response = api_client.delete(f'/api/v1/groups/{group.id}/members/{member.id}/')
            assert response.status_code == 409
            assert response.json()['error']['code'] == 'member_has_expenses'
            assert group.has_member(member.id)

    def test_expenses_in_other_groups_do_not_block_removal(self, api_client, trio, make_group, make_expense):
        group, alice, bob, carol = trio
        other = make_group('Other', members=[carol, bob])
        make_expense(other, carol, '20', [(carol, '10'), (bob, '10')])

        response = api_client.delete(f'/api/v1/groups/{group.id}/members/{carol.id}/')
        assert response.status_code == 200
