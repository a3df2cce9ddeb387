"""
API tests for authentication, user administration, audit log and health check.
"""
import pytest

from core.constants import UserRoles
from apps.audit.models import ActivityLog

pytestmark = pytest.mark.django_db


class TestAuthentication:
    def test_login_returns_tokens_and_user(self, api_client, cashier):
        response = api_client.post('/api/accounts/token/', {
            'email': 'cashier@example.com', 'password': 'Passw0rd!23'
        }, format='json')

        assert response.status_code == 200
        assert {'access', 'refresh', 'user'} <= set(response.data)
        assert response.data['user']['role'] == UserRoles.CASHIER

    def test_bearer_token_grants_access(self, api_client, cashier):
        tokens = api_client.post('/api/accounts/token/', {
            'email': 'cashier@example.com', 'password': 'Passw0rd!23'
        }, format='json').data

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        response = api_client.get('/api/queue/')

        assert response.status_code == 200
        cashier.refresh_from_db()
        assert cashier.last_login_ip == '127.0.0.1'

    def test_deactivated_user_is_rejected(self, api_client, cashier):
        tokens = api_client.post('/api/accounts/token/', {
            'email': 'cashier@example.com', 'password': 'Passw0rd!23'
        }, format='json').data
        cashier.is_active = False
        cashier.save()

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        assert api_client.get('/api/queue/').status_code == 401

    def test_wrong_password(self, api_client, cashier):
        response = api_client.post('/api/accounts/token/', {
            'email': 'cashier@example.com', 'password': 'nope'
        }, format='json')
        assert response.status_code == 401


class TestUsers:
    def test_admin_creates_user(self, admin_client):
        response = admin_client.post('/api/accounts/users/', {
            'email': 'new@example.com',
            'full_name': 'New Cashier',
            'role': UserRoles.CASHIER,
            'password': 'LongEnough1',
            'confirm_password': 'LongEnough1',
        }, format='json')

        assert response.status_code == 201
        assert response.data['role'] == UserRoles.CASHIER

    def test_non_admin_cannot_list_users(self, cashier_client):
        assert cashier_client.get('/api/accounts/users/').status_code == 403

    def test_me(self, sales_client, sales_agent):
        response = sales_client.get('/api/accounts/users/me/')
        assert response.data['email'] == sales_agent.email

    def test_me_cannot_change_role(self, sales_client, sales_agent):
        sales_client.patch('/api/accounts/users/me/', {'role': UserRoles.ADMIN}, format='json')
        sales_agent.refresh_from_db()
        assert sales_agent.role == UserRoles.SALES

    def test_delete_deactivates(self, admin_client, cashier):
        response = admin_client.delete(f'/api/accounts/users/{cashier.pk}/')
        assert response.status_code == 204
        cashier.refresh_from_db()
        assert cashier.is_active is False


class TestAudit:
    def test_api_requests_are_logged(self, sales_client, sales_agent, admin_client):
        sales_client.get('/api/queue/')

        log = ActivityLog.objects.get(user=sales_agent)
        assert log.method == 'GET'
        assert log.path == '/api/queue/'
        assert log.status_code == 200
        assert log.action == 'queue-list'

        response = admin_client.get('/api/audit/activity/', {'user': sales_agent.pk})
        assert response.status_code == 200
        assert response.data['count'] == 1

    def test_polling_is_not_logged(self, sales_client):
        sales_client.get('/api/notifications/events/')
        assert not ActivityLog.objects.exists()

    def test_anonymous_requests_are_not_logged(self, api_client):
        api_client.get('/api/queue/')
        assert not ActivityLog.objects.exists()


def test_health(client):
    response = client.get('/health/')
    assert response.status_code == 200
    assert response.json()['database'] == 'ok'
