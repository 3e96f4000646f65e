"""API tests for user administration."""

import uuid

import pytest
from fastapi import status

from bakery.core.exceptions import UserFriendlyDataError
from bakery.database.models import User, UserRole
from bakery.services.users.service import DELETING_SELF_NOT_PERMITTED
from tests.factories import make_user

USERS_URL = "/api/v1/users"


@pytest.fixture
def current_user(admin):
    return admin


class TestUserEndpoints:
    def test_create(self, client, user_service, admin):
        user_service.create_new.return_value = User(locked=False)
        user_service.apply_changes.side_effect = lambda user, **changes: user
        user_service.save.side_effect = lambda current, user: make_user(UserRole.BAKER)

        response = client.post(
            USERS_URL,
            json={
                "email": "Baker@Vaadin.com",
                "first_name": "Heidi",
                "last_name": "Carter",
                "role": "baker",
                "password": "baker",
            },
        )

        assert response.status_code == status.HTTP_201_CREATED
        changes = user_service.apply_changes.call_args.kwargs
        assert changes["email"] == "baker@vaadin.com"
        assert changes["role"] == UserRole.BAKER
        assert "password_hash" not in response.json()

    def test_short_password(self, client):
        response = client.post(
            USERS_URL,
            json={
                "email": "baker@vaadin.com",
                "first_name": "Heidi",
                "last_name": "Carter",
                "role": "baker",
                "password": "abc",
            },
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "password" in response.json()["fields"]

    def test_update_leaves_out_unset_fields(self, client, user_service):
        user = make_user(UserRole.BAKER)
        user_service.load.return_value = user
        user_service.save.side_effect = lambda current, entity: entity

        response = client.put(f"{USERS_URL}/{user.id}", json={"first_name": "Heidi", "version": 1})

        assert response.status_code == status.HTTP_200_OK
        user_service.check_version.assert_called_once_with(user, 1)
        changes = user_service.apply_changes.call_args.kwargs
        assert changes["first_name"] == "Heidi"
        assert changes["password"] is None

    def test_update_requires_version(self, client, user_service):
        response = client.put(f"{USERS_URL}/{uuid.uuid4()}", json={"first_name": "Heidi"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["fields"] == ["version"]
        user_service.load.assert_not_called()

    def test_delete_self(self, client, user_service, admin):
        user_service.delete_by_id.side_effect = UserFriendlyDataError(DELETING_SELF_NOT_PERMITTED)

        response = client.delete(f"{USERS_URL}/{admin.id}")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == DELETING_SELF_NOT_PERMITTED
