"""
Promote or demote a user.

  python -m inventory_tracker.scripts.set_user_role --email ops@example.com --role editor
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from sqlalchemy import func, select

from inventory_tracker.core.models import Role
from inventory_tracker.db.database import async_session_maker
from inventory_tracker.db.users import User


async def main(email: str, role: Role) -> int:
    async with async_session_maker() as db:
        res = await db.execute(select(User).where(func.lower(User.email) == email.strip().lower()))
        user = res.scalar_one_or_none()
        if not user:
            print(f"No user with email {email}", file=sys.stderr)
            return 1
        previous = user.role
        user.role = role.value
        await db.commit()
        print(f"{user.email}: {previous} -> {role.value}")
        return 0


if __name__ == "__main__":
    p = argparse.ArgumentParser()
    p.add_argument("--email", required=True)
    p.add_argument("--role", required=True, choices=[r.value for r in Role])
    args = p.parse_args()

    sys.exit(asyncio.run(main(args.email, Role(args.role))))
