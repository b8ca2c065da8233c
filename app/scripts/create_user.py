# create_user.py
"""
Create a user (admin, manager or customer) and print an access token for it.

    python -m app.scripts.create_user admin@example.com S3cret! --role admin
"""
import argparse
from datetime import timedelta

from app.api.dependencies import create_access_token
from app.config.database import SessionLocal
from app.models.user import User, UserRole


def create_user(email: str, password: str, role: UserRole, first_name: str = None, last_name: str = None):
    db = SessionLocal()

    try:
        user = db.query(User).filter(User.email == email).first()
        if user:
            print(f"User already exists: {email} ({user.role.value})")
        else:
            user = User(
                email=email,
                hashed_password=User.hash_password(password),
                first_name=first_name,
                last_name=last_name,
                role=role,
                is_active=True
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            print(f"✅ {role.value.capitalize()} user created: {email}")

        token = create_access_token({"sub": str(user.id)}, expires_delta=timedelta(days=7))
        print(f"🔑 Access token (7 days): {token}")

    except Exception as e:
        db.rollback()
        print("❌ Error creating user:", e)
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a platform user")
    parser.add_argument("email")
    parser.add_argument("password")
    parser.add_argument("--role", choices=[r.value for r in UserRole], default=UserRole.CUSTOMER.value)
    parser.add_argument("--first-name")
    parser.add_argument("--last-name")
    args = parser.parse_args()

    create_user(args.email, args.password, UserRole(args.role), args.first_name, args.last_name)
