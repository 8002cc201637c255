"""Create an admin account, or promote an existing user to admin.

Usage: python scripts/create_admin.py <email> <username> <password> [first_name] [last_name]
"""
import asyncio
import os
import sys

# Add project root to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pydantic import ValidationError
from sqlalchemy import or_, select

from app.core.exceptions import AppError
from app.core.security import Role
from app.db.session import async_session_maker
from app.models.user import User
from app.schemas.user import RegisterRequest
from app.services.auth_service import create_user


async def create_admin(email: str, username: str, password: str, first_name: str, last_name: str) -> int:
    async with async_session_maker() as session:
        result = await session.execute(
            select(User).where(or_(User.email == email, User.username == username))
        )
        existing = result.scalars().first()
        if existing:
            existing.role = Role.ADMIN.value
            await session.commit()
            print(f"Promoted existing user '{existing.username}' to admin.")
            return 0
        try:
            user = await create_user(
                session,
                RegisterRequest(
                    email=email,
                    username=username,
                    password=password,
                    first_name=first_name,
                    last_name=last_name,
                ),
                role=Role.ADMIN,
            )
        except ValidationError as e:
            for err in e.errors():
                field = ".".join(str(x) for x in err["loc"])
                print(f"Error: {field}: {err['msg']}")
            return 1
        except AppError as e:
            print(f"Error: {e.message}")
            return 1
        await session.commit()
        print("Success: admin created!")
        print(f"Email: {user.email}")
        print(f"Username: {user.username}")
        return 0


if __name__ == "__main__":
    if len(sys.argv) < 4:
        print(__doc__.strip().splitlines()[-1])
        sys.exit(1)

    args = sys.argv[1:]
    first_name = args[3] if len(args) > 3 else "Admin"
    last_name = args[4] if len(args) > 4 else "User"
    sys.exit(asyncio.run(create_admin(args[0], args[1], args[2], first_name, last_name)))
