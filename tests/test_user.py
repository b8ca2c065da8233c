from app.models.user import User, UserRole


def test_password_hash_round_trip():
    hashed = User.hash_password("S3cret-pass")
    user = User(email="someone@example.com", hashed_password=hashed)

    assert hashed != "S3cret-pass"
    assert user.verify_password("S3cret-pass")
    assert not user.verify_password("wrong")


def test_roles_and_full_name():
    admin = User(email="a@example.com", role=UserRole.ADMIN, first_name="Ada", last_name="Admin")
    manager = User(email="m@example.com", role=UserRole.MANAGER, first_name="Mia")

    assert admin.is_admin() and not admin.is_manager()
    assert manager.is_manager() and not manager.is_admin()
    assert admin.full_name == "Ada Admin"
    assert manager.full_name == "Mia"
