"""
Create an administrator account, or promote an existing one

Usage: python -m leaderboard_backend.scripts.create_admin --username NAME --email EMAIL --password PASS
"""

import argparse
import logging
from typing import List, Optional

from leaderboard_backend.core.database import get_db_session, init_db
from leaderboard_backend.core.security import SecurityUtils
from leaderboard_backend.models.user import User, UserRole
from leaderboard_backend.services.users import UserService
from leaderboard_backend.utils.validators import is_valid_password, is_valid_username

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Create or promote an administrator")
    p.add_argument("--username", required=True)
    p.add_argument("--email", required=True)
    p.add_argument("--password", required=True)
    args = p.parse_args(argv)

    logging.basicConfig(level=logging.INFO)

    if not is_valid_username(args.username):
        p.error("invalid username")
    if not is_valid_password(args.password):
        p.error("password must be 8-80 characters with a lowercase letter, an uppercase letter and a digit")

    init_db()

    with get_db_session() as db:
        by_email = UserService.get_user_by_email(db, args.email)
        by_name = UserService.get_user_by_username(db, args.username)

        if by_name is not None and by_name is not by_email:
            p.error(f"username {args.username} belongs to another account")
        if by_email is not None and by_email.username.lower() != args.username.lower():
            p.error(f"{args.email} is registered as {by_email.username}, not {args.username}")

        user = by_email
        if user is None:
            user = User(
                username=args.username,
                email=args.email,
                password=SecurityUtils.get_password_hash(args.password),
            )
            db.add(user)
        else:
            user.password = SecurityUtils.get_password_hash(args.password)
        user.role = UserRole.ADMINISTRATOR

    logger.info(f"Administrator ready: {args.email}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
