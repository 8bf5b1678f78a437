import pytest


@pytest.fixture()
def make_user(django_user_model):
    def _make_user(username, **extra):
        return django_user_model.objects.create_user(
            username=username,
            password="pass12345",
            email=f"{username}@example.com",
            **extra,
        )
    return _make_user


@pytest.fixture()
def user(make_user):
    return make_user("u1", first_name="Una", last_name="One")


@pytest.fixture()
def other_user(make_user):
    return make_user("u2", first_name="Dos", last_name="Two")

